"""Fetch the OpenStack resources needed for an audit run."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Mapping, Optional, TypeVar

import openstack
from openstack.exceptions import SDKException
from keystoneauth1.exceptions import ClientException

from .errors import CollaboratorError
from .models import (
    PORT_RANGE_MAX,
    PORT_RANGE_MIN,
    FloatingIP,
    Inventory,
    Port,
    Project,
    SecurityGroup,
    SecurityGroupRule,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

OPENSTACK_ERRORS = (SDKException, ClientException)


def connect(
    cloud: Optional[str] = None,
    region_name: Optional[str] = None,
    *,
    cacert: Optional[str] = None,
    cert: Optional[str] = None,
    key: Optional[str] = None,
) -> "openstack.connection.Connection":
    """Open an authenticated connection.

    Credentials are resolved by openstacksdk from ``clouds.yaml`` or ``OS_*``
    environment variables. ``cacert`` verifies the endpoint, ``cert`` and
    ``key`` present a client certificate.
    """

    options: dict[str, Any] = {}
    if cloud:
        options["cloud"] = cloud
    if region_name:
        options["region_name"] = region_name
    if cacert:
        options["cacert"] = cacert
    if cert and key:
        options["cert"] = cert
        options["key"] = key
    try:
        conn = openstack.connect(**options)
        conn.authorize()
    except OPENSTACK_ERRORS as exc:
        raise CollaboratorError("authenticate OpenStack API", exc) from exc
    return conn


def fetch_inventory(conn: Any) -> Inventory:
    """Return a complete snapshot of projects, ports, floating IPs and groups."""

    projects = _fetch("fetch projects", conn.identity.projects, project_from_sdk)
    ports = _fetch("fetch ports", conn.network.ports, port_from_sdk)
    floating_ips = _fetch("fetch floating IPs", conn.network.ips, floating_ip_from_sdk)
    security_groups = _fetch(
        "fetch security groups", conn.network.security_groups, security_group_from_sdk
    )
    logger.info(
        "Fetched %d projects, %d ports, %d floating IPs and %d security groups",
        len(projects),
        len(ports),
        len(floating_ips),
        len(security_groups),
    )
    return Inventory(
        projects=projects,
        ports=ports,
        floating_ips=floating_ips,
        security_groups=security_groups,
    )


def _fetch(phase: str, lister: Callable[[], Iterable[Any]], convert: Callable[[Any], T]) -> List[T]:
    try:
        return [convert(resource) for resource in lister()]
    except OPENSTACK_ERRORS as exc:
        raise CollaboratorError(phase, exc) from exc


def project_from_sdk(project: Any) -> Project:
    return Project(id=project.id, name=project.name or "")


def port_from_sdk(port: Any) -> Port:
    fixed_ips = [
        entry["ip_address"] for entry in (port.fixed_ips or []) if entry.get("ip_address")
    ]
    return Port(
        id=port.id,
        fixed_ips=tuple(fixed_ips),
        security_group_ids=tuple(port.security_group_ids or ()),
    )


def floating_ip_from_sdk(fip: Any) -> FloatingIP:
    return FloatingIP(
        id=fip.id,
        port_id=fip.port_id or None,
        floating_ip_address=getattr(fip, "floating_ip_address", None),
    )


def security_group_from_sdk(group: Any) -> SecurityGroup:
    tenant_id = getattr(group, "project_id", None) or getattr(group, "tenant_id", None) or ""
    created_at = parse_timestamp(group.created_at) or datetime(1970, 1, 1, tzinfo=timezone.utc)
    return SecurityGroup(
        id=group.id,
        name=group.name or "",
        tenant_id=tenant_id,
        created_at=created_at,
        rules=tuple(rule_from_sdk(rule) for rule in (group.security_group_rules or [])),
        description=group.description or "",
        updated_at=parse_timestamp(getattr(group, "updated_at", None)),
        tags=tuple(getattr(group, "tags", None) or ()),
    )


def rule_from_sdk(rule: Mapping[str, Any]) -> SecurityGroupRule:
    port_min = rule.get("port_range_min")
    port_max = rule.get("port_range_max")
    return SecurityGroupRule(
        direction=rule.get("direction") or "",
        protocol=rule.get("protocol"),
        remote_ip_prefix=rule.get("remote_ip_prefix"),
        port_range_min=PORT_RANGE_MIN if port_min is None else int(port_min),
        port_range_max=PORT_RANGE_MAX if port_max is None else int(port_max),
        id=rule.get("id") or "",
        ethertype=rule.get("ethertype"),
        remote_group_id=rule.get("remote_group_id"),
        description=rule.get("description") or "",
    )


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an API timestamp; naive values are taken as UTC."""

    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


__all__ = [
    "connect",
    "fetch_inventory",
    "floating_ip_from_sdk",
    "parse_timestamp",
    "port_from_sdk",
    "project_from_sdk",
    "rule_from_sdk",
    "security_group_from_sdk",
]
