"""Shared helpers for the security group checks."""
from __future__ import annotations

import ipaddress
import logging
from typing import Iterable, Union

from .errors import InvalidAddressError, TenantNotFoundError
from .models import Project

logger = logging.getLogger(__name__)

PRIVATE_NETWORKS = tuple(
    ipaddress.ip_network(cidr) for cidr in ("10.0.0.0/8", "172.16.0.0/12", "192.168.0.0/16")
)
IPV4_LINK_LOCAL_MULTICAST = ipaddress.ip_network("224.0.0.0/24")


def is_link_local_multicast(ip: Union[ipaddress.IPv4Address, ipaddress.IPv6Address]) -> bool:
    """Return whether ``ip`` is 224.0.0.0/24 or an IPv6 multicast with link-local scope.

    The IPv6 check looks at the scope nibble only (``ffX2::``), whatever the flags.
    """

    if isinstance(ip, ipaddress.IPv4Address):
        return ip in IPV4_LINK_LOCAL_MULTICAST
    packed = ip.packed
    return packed[0] == 0xFF and packed[1] & 0x0F == 0x02


def is_private_ip(address: str) -> bool:
    """Return whether ``address`` is internal rather than internet routable.

    Loopback, link-local unicast and link-local multicast addresses count as
    private, as does anything inside the RFC 1918 ranges. Raises
    :class:`InvalidAddressError` when ``address`` cannot be parsed.
    """

    try:
        ip = ipaddress.ip_address(address)
    except ValueError as exc:
        raise InvalidAddressError(address) from exc

    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped

    if ip.is_loopback or ip.is_link_local:
        return True
    if is_link_local_multicast(ip):
        return True
    return any(ip in network for network in PRIVATE_NETWORKS)


def get_project_name(tenant_id: str, projects: Iterable[Project]) -> str:
    """Return the name of the project with ``tenant_id``."""

    for project in projects:
        if project.id == tenant_id:
            return project.name
    raise TenantNotFoundError(tenant_id)


def resolve_tenant_name(tenant_id: str, projects: Iterable[Project]) -> str:
    """Return a display label for ``tenant_id``, falling back to the id itself."""

    try:
        return get_project_name(tenant_id, projects)
    except TenantNotFoundError as exc:
        logger.debug("%s; using the raw id as label", exc)
        return tenant_id


__all__ = ["get_project_name", "is_link_local_multicast", "is_private_ip", "resolve_tenant_name"]
