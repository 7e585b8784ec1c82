"""Tests for statically configured allow rules."""

from __future__ import annotations

from typing import List

from openstack_sg_audit.checks import is_allowed, resolve_allow_rule_tenants
from openstack_sg_audit.models import AllowRule, Project

from .builders import make_group, open_rule


def allow(ports: List[str], tenant_id: str = "t1", sg: str = "web") -> AllowRule:
    return AllowRule(tenant_name="Alpha", security_group_name=sg, ports=ports, tenant_id=tenant_id)


def test_range_entry_requires_exact_bounds() -> None:
    """``80-80`` covers port 80 only, not a wider range starting at 80."""

    rules = [allow(["80-80"])]
    group = make_group()

    assert is_allowed(rules, group, open_rule(80, 80)) is True
    assert is_allowed(rules, group, open_rule(80, 443)) is False


def test_literal_entries_cover_both_bounds() -> None:
    rules = [allow(["80", "443"])]
    group = make_group()

    assert is_allowed(rules, group, open_rule(80, 443)) is True
    assert is_allowed(rules, group, open_rule(80, 81)) is False
    assert is_allowed(rules, group, open_rule(443, 443)) is True


def test_single_literal_does_not_cover_range() -> None:
    rules = [allow(["22"])]

    assert is_allowed(rules, make_group(), open_rule(22, 23)) is False


def test_rule_must_match_tenant_and_group_name() -> None:
    """Matching uses the tenant id and group name, not the group id."""

    rules = [allow(["22"], tenant_id="t2"), allow(["22"], sg="db")]
    group = make_group(group_id="sg-99")

    assert is_allowed(rules, group, open_rule(22, 22)) is False
    assert is_allowed([allow(["22"])], group, open_rule(22, 22)) is True


def test_unresolved_tenant_never_matches() -> None:
    rules = [AllowRule(tenant_name="Ghost", security_group_name="web", ports=["22"])]

    assert is_allowed(rules, make_group(), open_rule(22, 22)) is False


def test_resolve_allow_rule_tenants_uses_project_names() -> None:
    """The last project with a matching name provides the tenant id."""

    rules = [
        AllowRule(tenant_name="Alpha", security_group_name="web", ports=["22"]),
        AllowRule(tenant_name="Ghost", security_group_name="web", ports=["22"]),
    ]
    projects = [Project(id="t1", name="Alpha"), Project(id="t3", name="Alpha")]

    resolved = resolve_allow_rule_tenants(rules, projects)

    assert [rule.tenant_id for rule in resolved] == ["t3", None]


def test_resolve_allow_rule_tenants_leaves_configured_rules_untouched() -> None:
    """Each run resolves tenant names afresh from its own project list."""

    configured = [AllowRule(tenant_name="Alpha", security_group_name="web", ports=["22"])]

    first = resolve_allow_rule_tenants(configured, [Project(id="t1", name="Alpha")])
    second = resolve_allow_rule_tenants(configured, [Project(id="t1", name="Renamed")])

    assert first[0].tenant_id == "t1"
    assert second[0].tenant_id is None
    assert configured[0].tenant_id is None
