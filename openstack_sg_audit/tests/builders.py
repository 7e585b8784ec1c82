"""Small factories for security group test data."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from openstack_sg_audit.models import Port, SecurityGroup, SecurityGroupRule

CREATED_AT = datetime(2021, 4, 1, 12, 30, tzinfo=timezone.utc)


def open_rule(port_min: int, port_max: int, **overrides) -> SecurityGroupRule:
    values = dict(
        direction="ingress",
        protocol="tcp",
        remote_ip_prefix="0.0.0.0/0",
        port_range_min=port_min,
        port_range_max=port_max,
    )
    values.update(overrides)
    return SecurityGroupRule(**values)


def make_group(
    group_id: str = "sg-1",
    name: str = "web",
    tenant_id: str = "t1",
    rules: Sequence[SecurityGroupRule] = (),
) -> SecurityGroup:
    return SecurityGroup(
        id=group_id, name=name, tenant_id=tenant_id, created_at=CREATED_AT, rules=tuple(rules)
    )


def public_port(group_id: str, port_id: str = "port-1") -> Port:
    return Port(id=port_id, fixed_ips=("203.0.113.5",), security_group_ids=(group_id,))
