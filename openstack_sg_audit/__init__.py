"""OpenStack security group auditing toolkit."""

from __future__ import annotations

from .checks import evaluate_open_access, evaluate_policy, is_allowed, is_exposed
from .core import AuditResults, print_findings, run_audit
from .errors import (
    AuditError,
    CollaboratorError,
    ConfigError,
    EvaluationError,
    InvalidAddressError,
    TenantNotFoundError,
)
from .findings import EvaluationResult, Finding, FindingField
from .utils import is_private_ip, resolve_tenant_name

__all__ = [
    "AuditError",
    "AuditResults",
    "CollaboratorError",
    "ConfigError",
    "EvaluationError",
    "EvaluationResult",
    "Finding",
    "FindingField",
    "InvalidAddressError",
    "TenantNotFoundError",
    "evaluate_open_access",
    "evaluate_policy",
    "is_allowed",
    "is_exposed",
    "is_private_ip",
    "print_findings",
    "resolve_tenant_name",
    "run_audit",
]
