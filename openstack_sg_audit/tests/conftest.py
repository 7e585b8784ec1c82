"""Shared fixtures for the security group audit tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


from openstack_sg_audit.models import FloatingIP, Inventory, Project  # noqa: E402

from .builders import make_group, open_rule, public_port  # noqa: E402


@pytest.fixture
def exposed_inventory() -> Inventory:
    """One exposed group ``sg-1`` in tenant ``t1`` (Alpha) with SSH open."""

    group = make_group(rules=[open_rule(22, 22)])
    return Inventory(
        projects=(Project(id="t1", name="Alpha"),),
        ports=(public_port("sg-1"),),
        floating_ips=(FloatingIP(id="fip-1"),),
        security_groups=(group,),
    )
