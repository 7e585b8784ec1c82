"""Typed records for the OpenStack resources inspected by the audit."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

PORT_RANGE_MIN = 1
PORT_RANGE_MAX = 65535

DEFAULT_QUERY = "x = data.example.allow"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class SecurityGroupRule:
    """A single ingress or egress rule belonging to a security group."""

    direction: str
    protocol: Optional[str] = None
    remote_ip_prefix: Optional[str] = None
    port_range_min: int = PORT_RANGE_MIN
    port_range_max: int = PORT_RANGE_MAX
    id: str = ""
    ethertype: Optional[str] = None
    remote_group_id: Optional[str] = None
    description: str = ""

    @property
    def port_range(self) -> str:
        return f"{self.port_range_min}-{self.port_range_max}"

    def display_text(self) -> str:
        """Return the one-line summary used in policy notifications."""

        return f"{self.direction}, IP Range: {self.remote_ip_prefix or ''}, Port Range: {self.port_range}"


@dataclass(frozen=True)
class SecurityGroup:
    """Snapshot of a security group and its ordered rules."""

    id: str
    name: str
    tenant_id: str
    created_at: datetime
    rules: Sequence[SecurityGroupRule] = ()
    description: str = ""
    updated_at: Optional[datetime] = None
    tags: Sequence[str] = ()

    def to_facts(self) -> Dict[str, Any]:
        """Flatten the group into the plain record handed to the policy engine.

        Keys follow the OpenStack networking API names so policies can be
        written against the documented resource shape. ``created_at`` is an
        integer count of nanoseconds since the Unix epoch.
        """

        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "tenant_id": self.tenant_id,
            "project_id": self.tenant_id,
            "security_group_rules": [
                {
                    "id": rule.id,
                    "direction": rule.direction,
                    "ethertype": rule.ethertype,
                    "protocol": rule.protocol,
                    "remote_ip_prefix": rule.remote_ip_prefix,
                    "remote_group_id": rule.remote_group_id,
                    "port_range_min": rule.port_range_min,
                    "port_range_max": rule.port_range_max,
                    "description": rule.description,
                    "security_group_id": self.id,
                    "tenant_id": self.tenant_id,
                }
                for rule in self.rules
            ],
            "tags": list(self.tags),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "created_at": unix_nanos(self.created_at),
        }


@dataclass(frozen=True)
class Port:
    """A network port and the security groups attached to it."""

    id: str
    fixed_ips: Sequence[str] = ()
    security_group_ids: Sequence[str] = ()


@dataclass(frozen=True)
class FloatingIP:
    """A public address, optionally bound to a port."""

    id: str
    port_id: Optional[str] = None
    floating_ip_address: Optional[str] = None


@dataclass(frozen=True)
class Project:
    """An identity project (tenant)."""

    id: str
    name: str


@dataclass
class AllowRule:
    """Configured exception for a tenant's security group.

    ``tenant_id`` is filled in from the project list at the start of a run;
    until then only ``tenant_name`` is known.
    """

    tenant_name: str
    security_group_name: str
    ports: List[str] = field(default_factory=list)
    tenant_id: Optional[str] = None


@dataclass(frozen=True)
class PolicyDefinition:
    """A policy to evaluate against every security group."""

    name: str
    policy: Optional[str] = None
    data: Optional[str] = None
    query: str = DEFAULT_QUERY
    prefix_message: str = ""
    suffix_message: str = ""

    @property
    def paths(self) -> List[str]:
        return [path for path in (self.policy, self.data) if path]


@dataclass(frozen=True)
class Inventory:
    """Point-in-time snapshot of every resource needed for one audit run."""

    projects: Sequence[Project] = ()
    ports: Sequence[Port] = ()
    floating_ips: Sequence[FloatingIP] = ()
    security_groups: Sequence[SecurityGroup] = ()


def unix_nanos(value: datetime) -> int:
    """Return ``value`` as nanoseconds since the epoch; naive values are UTC."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - _EPOCH
    return (delta.days * 86400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1000


__all__ = [
    "AllowRule",
    "DEFAULT_QUERY",
    "FloatingIP",
    "Inventory",
    "PORT_RANGE_MAX",
    "PORT_RANGE_MIN",
    "PolicyDefinition",
    "Port",
    "Project",
    "SecurityGroup",
    "SecurityGroupRule",
    "unix_nanos",
]
