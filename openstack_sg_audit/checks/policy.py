"""Evaluate security groups against externally defined policies."""
from __future__ import annotations

import logging
from datetime import timezone
from typing import Iterable

from ..errors import EvaluationError
from ..findings import EvaluationResult, Finding, FindingField
from ..models import Inventory, PolicyDefinition, SecurityGroup
from ..policy_engine import PolicyEngine
from ..utils import resolve_tenant_name

logger = logging.getLogger(__name__)


def evaluate_policy(
    policy: PolicyDefinition,
    engine: PolicyEngine,
    inventory: Inventory,
    allowed_group_ids: Iterable[str],
) -> EvaluationResult:
    """Return a finding for every non-exempt group the policy matches.

    A policy that cannot be evaluated aborts the pass with an
    :class:`EvaluationError` naming the policy and the group.
    """

    allowed_group_ids = set(allowed_group_ids)
    result = EvaluationResult()
    for group in inventory.security_groups:
        if group.id in allowed_group_ids:
            logger.debug("Security group %s is temporarily allowed; skipping", group.id)
            continue
        try:
            matched = engine.evaluate(group.to_facts())
        except EvaluationError as exc:
            raise EvaluationError(
                f"Failed to evaluate policy {policy.name} for security group {group.id}: {exc}"
            ) from exc
        if matched:
            result.findings.append(_build_finding(policy, group, inventory))
    return result


def _build_finding(
    policy: PolicyDefinition, group: SecurityGroup, inventory: Inventory
) -> Finding:
    tenant = resolve_tenant_name(group.tenant_id, inventory.projects)
    created_at = group.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    created = str(created_at.astimezone())
    rules = "".join(f"{rule.display_text()}\n" for rule in group.rules)
    return Finding(
        kind="policy-match",
        group=group,
        tenant=tenant,
        fields=[
            FindingField("Name", group.name),
            FindingField("Tenant", tenant, short=True),
            FindingField("ID", group.id, short=True),
            FindingField("Created", created),
            FindingField("Rules", rules),
        ],
        policy=policy.name,
    )


__all__ = ["evaluate_policy"]
