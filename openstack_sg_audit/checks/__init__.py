"""Security group checks: exposure, allow rules, open access and policies."""
from __future__ import annotations

from .allow_rules import is_allowed, resolve_allow_rule_tenants
from .exposure import is_exposed
from .open_access import evaluate_open_access
from .policy import evaluate_policy

__all__ = [
    "evaluate_open_access",
    "evaluate_policy",
    "is_allowed",
    "is_exposed",
    "resolve_allow_rule_tenants",
]
