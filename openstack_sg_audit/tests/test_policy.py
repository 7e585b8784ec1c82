"""Tests for evaluating security groups against policies."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

import pytest

from openstack_sg_audit.checks import evaluate_policy
from openstack_sg_audit.errors import EvaluationError
from openstack_sg_audit.models import Inventory, PolicyDefinition, Project, unix_nanos

from .builders import CREATED_AT, make_group, open_rule


class RecordingEngine:
    """Policy engine that matches groups by name and records its inputs."""

    def __init__(self, *names: str) -> None:
        self.names = set(names)
        self.calls: List[Dict[str, Any]] = []

    def evaluate(self, facts: Mapping[str, Any]) -> bool:
        self.calls.append(dict(facts))
        return facts["name"] in self.names


class FailingEngine:
    def evaluate(self, facts: Mapping[str, Any]) -> bool:
        raise EvaluationError("rego_parse_error")


POLICY = PolicyDefinition(name="no-default", policy="policy.rego")


@pytest.fixture
def inventory() -> Inventory:
    return Inventory(
        projects=(Project(id="t1", name="Alpha"),),
        security_groups=(
            make_group(
                "sg-1",
                "default",
                rules=[open_rule(22, 22), open_rule(1, 65535, direction="egress", remote_ip_prefix=None)],
            ),
            make_group("sg-2", "web", tenant_id="t2"),
            make_group("sg-3", "default", tenant_id="t2"),
        ),
    )


def test_matching_groups_produce_findings(inventory: Inventory) -> None:
    result = evaluate_policy(POLICY, RecordingEngine("default"), inventory, [])

    assert [finding.group.id for finding in result.findings] == ["sg-1", "sg-3"]
    first = result.findings[0]
    assert first.kind == "policy-match"
    assert first.policy == "no-default"
    fields = {item.title: item for item in first.fields}
    assert fields["Tenant"].value == "Alpha"
    assert fields["Tenant"].short is True
    assert fields["Rules"].value == (
        "ingress, IP Range: 0.0.0.0/0, Port Range: 22-22\n"
        "egress, IP Range: , Port Range: 1-65535\n"
    )
    assert fields["Created"].value == str(CREATED_AT.astimezone())
    assert result.findings[1].tenant == "t2"


def test_allowed_groups_are_not_evaluated(inventory: Inventory) -> None:
    """Temporarily allowed groups are never handed to the engine."""

    engine = RecordingEngine("default")

    result = evaluate_policy(POLICY, engine, inventory, ["sg-1"])

    assert [call["id"] for call in engine.calls] == ["sg-2", "sg-3"]
    assert [finding.group.id for finding in result.findings] == ["sg-3"]


def test_engine_receives_flat_facts(inventory: Inventory) -> None:
    engine = RecordingEngine()

    result = evaluate_policy(POLICY, engine, inventory, [])

    assert result.matched is False
    facts = engine.calls[0]
    assert facts["created_at"] == unix_nanos(CREATED_AT)
    assert facts["created_at"] == 1617280200 * 1_000_000_000
    assert facts["tenant_id"] == "t1"
    assert facts["security_group_rules"][0]["port_range_min"] == 22
    assert facts["security_group_rules"][0]["remote_ip_prefix"] == "0.0.0.0/0"


def test_evaluation_errors_abort_the_pass(inventory: Inventory) -> None:
    with pytest.raises(EvaluationError) as excinfo:
        evaluate_policy(POLICY, FailingEngine(), inventory, [])

    assert str(excinfo.value) == (
        "Failed to evaluate policy no-default for security group sg-1: rego_parse_error"
    )
