"""Exception hierarchy for the OpenStack security group audit."""
from __future__ import annotations

from typing import Optional


class AuditError(Exception):
    """Base class for every error raised by the audit."""


class ConfigError(AuditError):
    """The configuration file is missing or malformed."""


class InvalidAddressError(AuditError, ValueError):
    """An address attached to a port could not be parsed."""

    def __init__(self, address: object, group_id: Optional[str] = None) -> None:
        message = f"Invalid IP address: {address!r}"
        if group_id is not None:
            message = f"Failed to evaluate exposure of security group {group_id}: {message}"
        super().__init__(message)
        self.address = address
        self.group_id = group_id


class EvaluationError(AuditError):
    """The policy engine failed to evaluate a query."""


class TenantNotFoundError(AuditError, LookupError):
    """A tenant id is not present in the project list."""

    def __init__(self, tenant_id: str) -> None:
        super().__init__(f"Not found project: {tenant_id}")
        self.tenant_id = tenant_id


class CollaboratorError(AuditError):
    """An external system (OpenStack, Redis, Slack) failed during ``phase``.

    The original exception is kept as ``__cause__`` by raising with ``from``.
    """

    def __init__(self, phase: str, cause: Optional[BaseException] = None) -> None:
        message = f"Failed to {phase}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.phase = phase


__all__ = [
    "AuditError",
    "CollaboratorError",
    "ConfigError",
    "EvaluationError",
    "InvalidAddressError",
    "TenantNotFoundError",
]
