"""Statically configured exceptions for open security group rules."""
from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Iterable, List

from ..models import AllowRule, Project, SecurityGroup, SecurityGroupRule

logger = logging.getLogger(__name__)

_PORT_RANGE_PATTERN = re.compile(r"(\d*)-(\d*)")


def resolve_allow_rule_tenants(
    rules: Iterable[AllowRule], projects: Iterable[Project]
) -> List[AllowRule]:
    """Return copies of ``rules`` with ``tenant_id`` looked up by tenant name.

    When several projects share the name the last one listed wins. Rules for
    unknown tenants get no ``tenant_id`` and never match. ``rules`` themselves
    are left untouched.
    """

    projects = list(projects)
    resolved: List[AllowRule] = []
    for rule in rules:
        tenant_id = None
        for project in projects:
            if rule.tenant_name == project.name:
                tenant_id = project.id
        resolved.append(replace(rule, tenant_id=tenant_id))
        if tenant_id is None:
            logger.warning(
                "Allow rule for security group %r references unknown tenant %r",
                rule.security_group_name,
                rule.tenant_name,
            )
    return resolved


def is_allowed(
    rules: Iterable[AllowRule], group: SecurityGroup, rule: SecurityGroupRule
) -> bool:
    """Return whether ``rule`` on ``group`` is covered by one of ``rules``.

    Candidates are matched on tenant id and security group name. A ``min-max``
    entry only covers a rule with exactly those bounds; literal entries cover
    a rule when both its lower and upper bound are listed.
    """

    port_min = str(rule.port_range_min)
    port_max = str(rule.port_range_max)
    for allow_rule in rules:
        if allow_rule.tenant_id is None:
            continue
        if allow_rule.tenant_id != group.tenant_id or allow_rule.security_group_name != group.name:
            continue
        for entry in allow_rule.ports:
            match = _PORT_RANGE_PATTERN.search(entry)
            if match and match.group(1) == port_min and match.group(2) == port_max:
                return True
        if port_min in allow_rule.ports and port_max in allow_rule.ports:
            return True
    return False


__all__ = ["is_allowed", "resolve_allow_rule_tenants"]
