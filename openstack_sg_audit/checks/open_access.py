"""Find security groups that allow TCP from anywhere on exposed ports."""
from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from ..findings import EvaluationResult, Finding, FindingField
from ..models import AllowRule, Inventory, SecurityGroup, SecurityGroupRule
from ..utils import resolve_tenant_name
from .allow_rules import is_allowed
from .exposure import is_exposed

logger = logging.getLogger(__name__)

ANY_IPV4 = "0.0.0.0/0"


def is_open_to_internet(rule: SecurityGroupRule) -> bool:
    return (
        rule.remote_ip_prefix == ANY_IPV4
        and rule.protocol == "tcp"
        and rule.direction == "ingress"
    )


def evaluate_open_access(
    inventory: Inventory,
    allow_rules: Sequence[AllowRule],
    allowed_group_ids: Iterable[str],
) -> EvaluationResult:
    """Return one finding per unexcepted open TCP ingress rule on an exposed group."""

    allowed_group_ids = set(allowed_group_ids)
    result = EvaluationResult()
    for group in inventory.security_groups:
        if not is_exposed(group, inventory.ports, inventory.floating_ips):
            continue
        for rule in group.rules:
            if not is_open_to_internet(rule):
                continue
            if is_allowed(allow_rules, group, rule):
                continue
            if group.id in allowed_group_ids:
                logger.debug("Security group %s is temporarily allowed; skipping", group.id)
                continue
            result.findings.append(_build_finding(group, rule, inventory))
    return result


def _build_finding(
    group: SecurityGroup, rule: SecurityGroupRule, inventory: Inventory
) -> Finding:
    tenant = resolve_tenant_name(group.tenant_id, inventory.projects)
    fields: List[FindingField] = [
        FindingField("Tenant", tenant),
        FindingField("ID", group.id),
        FindingField("Name", group.name),
        FindingField("PortRange", rule.port_range),
    ]
    return Finding(
        kind="open-access",
        group=group,
        tenant=tenant,
        fields=fields,
        port_range=rule.port_range,
    )


__all__ = ["ANY_IPV4", "evaluate_open_access", "is_open_to_internet"]
