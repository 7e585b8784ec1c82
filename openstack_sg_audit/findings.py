"""Data models for security group audit findings."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from .models import SecurityGroup

FindingKind = Literal["open-access", "policy-match"]


@dataclass(frozen=True)
class FindingField:
    """A titled value rendered in notifications and reports."""

    title: str
    value: str
    short: bool = False


@dataclass
class Finding:
    """Represents a security group flagged by one of the checks."""

    kind: FindingKind
    group: SecurityGroup
    tenant: str
    fields: List[FindingField]
    port_range: Optional[str] = None
    policy: Optional[str] = None

    def detail(self) -> str:
        """Short description used for console and spreadsheet output."""

        if self.kind == "open-access":
            return f"TCP {self.port_range} open to 0.0.0.0/0"
        return f"Matched policy {self.policy}"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "tenant": self.tenant,
            "security_group_id": self.group.id,
            "security_group_name": self.group.name,
            "port_range": self.port_range,
            "policy": self.policy,
            "fields": [
                {"title": item.title, "value": item.value, "short": item.short}
                for item in self.fields
            ],
        }


@dataclass
class EvaluationResult:
    """Findings produced by one evaluator pass.

    ``matched`` is true when at least one finding was produced and is what
    decides whether a notification is sent.
    """

    findings: List[Finding] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return bool(self.findings)


__all__ = ["EvaluationResult", "Finding", "FindingField", "FindingKind"]
