"""Decide whether a security group is reachable from the internet."""
from __future__ import annotations

from typing import Iterable, Sequence

from ..errors import InvalidAddressError
from ..models import FloatingIP, Port, SecurityGroup
from ..utils import is_private_ip


def is_exposed(
    group: SecurityGroup, ports: Iterable[Port], floating_ips: Sequence[FloatingIP]
) -> bool:
    """Return whether any port carrying ``group`` has a public address.

    A port counts when a floating IP is bound to it or when one of its fixed
    IPs is public. :class:`InvalidAddressError` naming the group is raised
    when a fixed IP cannot be classified.
    """

    bound_port_ids = {fip.port_id for fip in floating_ips if fip.port_id}
    for port in ports:
        if group.id not in port.security_group_ids:
            continue
        if port.id in bound_port_ids:
            return True
        for address in port.fixed_ips:
            try:
                private = is_private_ip(address)
            except InvalidAddressError as exc:
                raise InvalidAddressError(address, group_id=group.id) from exc
            if not private:
                return True
    return False


__all__ = ["is_exposed"]
