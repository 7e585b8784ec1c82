"""Core orchestration utilities for the security group audit."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Protocol, Sequence

from .checks import evaluate_open_access, evaluate_policy, resolve_allow_rule_tenants
from .config import AuditConfig
from .findings import EvaluationResult, Finding
from .models import Inventory, PolicyDefinition
from .policy_engine import PolicyEngine

logger = logging.getLogger(__name__)

PolicyEngineFactory = Callable[[PolicyDefinition], PolicyEngine]


class Notifier(Protocol):
    def notify(self, findings: Iterable[Finding], prefix: str, suffix: str) -> None:
        ...


@dataclass
class PolicyReport:
    """Findings for a single configured policy."""

    policy: PolicyDefinition
    result: EvaluationResult


@dataclass
class AuditResults:
    """Outcome of a full audit run."""

    open_access: EvaluationResult
    policies: List[PolicyReport] = field(default_factory=list)

    @property
    def findings(self) -> List[Finding]:
        findings = list(self.open_access.findings)
        for report in self.policies:
            findings.extend(report.result.findings)
        return findings


def run_audit(
    config: AuditConfig,
    fetch_inventory: Callable[[], Inventory],
    fetch_allowed_groups: Callable[[], Sequence[str]],
    engine_factory: PolicyEngineFactory,
    notifier: Optional[Notifier] = None,
) -> AuditResults:
    """Fetch a snapshot, run every check and notify about what was found.

    Notifications are skipped in dry-run mode or when no ``notifier`` is
    given. Any collaborator or evaluation error aborts the run.
    """

    allowed_group_ids = list(fetch_allowed_groups())
    inventory = fetch_inventory()
    allow_rules = resolve_allow_rule_tenants(config.rules, inventory.projects)

    logger.info("Start to find security groups allowed to access from any.")
    open_access = evaluate_open_access(inventory, allow_rules, allowed_group_ids)
    if open_access.matched:
        _notify(notifier, config, open_access.findings, config.prefix_message, config.suffix_message)
        logger.info("Security groups allowed to access from any were found.")
    else:
        logger.info("No security group allowed to access from any was found.")

    results = AuditResults(open_access=open_access)

    logger.info("Start to find security groups matching policies.")
    for policy in config.policies:
        engine = engine_factory(policy)
        result = evaluate_policy(policy, engine, inventory, allowed_group_ids)
        if result.matched:
            _notify(notifier, config, result.findings, policy.prefix_message, policy.suffix_message)
            logger.info("Security groups matching policy %s were found.", policy.name)
        else:
            logger.info("No security group matching policy %s was found.", policy.name)
        results.policies.append(PolicyReport(policy=policy, result=result))
    return results


def _notify(
    notifier: Optional[Notifier],
    config: AuditConfig,
    findings: List[Finding],
    prefix: str,
    suffix: str,
) -> None:
    if config.dry_run:
        logger.info("Dry run: not sending %d finding(s).", len(findings))
        return
    if notifier is None:
        logger.warning("No notifier configured: not sending %d finding(s).", len(findings))
        return
    notifier.notify(findings, prefix, suffix)


def print_findings(findings: Iterable[Finding]) -> None:
    """Pretty-print findings to stdout."""

    findings = list(findings)
    if not findings:
        print("No findings detected.")
        return

    header = f"{'Kind':<13} {'Tenant':<20} {'Security group':<40} Detail"
    print(header)
    print("-" * len(header))
    for finding in findings:
        group = f"{finding.group.name} ({finding.group.id})"
        group = (group[:37] + "...") if len(group) > 40 else group
        print(f"{finding.kind:<13} {finding.tenant:<20} {group:<40} {finding.detail()}")


def format_allow_rule(finding: Finding) -> str:
    """Return a ``[[rules]]`` TOML snippet that would allow ``finding``."""

    lines = [
        "[[rules]]",
        f"tenant = {json.dumps(finding.tenant)}",
        f"sg = {json.dumps(finding.group.name)}",
    ]
    if finding.port_range:
        lines.append(f"port = [{json.dumps(finding.port_range)}]")
    return "\n".join(lines)


def print_allow_rules(findings: Iterable[Finding]) -> None:
    """Print allow-rule snippets for every open-access finding."""

    for finding in findings:
        if finding.kind == "open-access":
            print(format_allow_rule(finding))
            print()


def export_findings_to_json(findings: Iterable[Finding], path: str) -> str:
    with open(path, "w", encoding="utf-8") as fh:
        json.dump([finding.as_dict() for finding in findings], fh, indent=2)
    return path


def export_findings_to_excel(findings: Iterable[Finding], path: str) -> str:
    """Write *findings* to an Excel workbook located at *path*."""

    try:
        from openpyxl import Workbook
        from openpyxl.utils import get_column_letter
    except ImportError as exc:  # pragma: no cover - dependency missing during tests
        raise RuntimeError(
            "The 'openpyxl' package is required to export "
            "findings to Excel. Install it with 'pip install openpyxl'."
        ) from exc

    headers = ("Kind", "Tenant", "Security Group ID", "Security Group", "Detail")
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Findings"

    sheet.append(list(headers))
    column_widths = [len(header) for header in headers]

    for finding in findings:
        values = [
            finding.kind,
            finding.tenant,
            finding.group.id,
            finding.group.name,
            finding.detail(),
        ]
        sheet.append(values)
        for idx, value in enumerate(values):
            column_widths[idx] = max(column_widths[idx], len(str(value)))

    for idx, width in enumerate(column_widths, start=1):
        sheet.column_dimensions[get_column_letter(idx)].width = min(width + 2, 60)

    workbook.save(path)
    return path


__all__ = [
    "AuditResults",
    "Notifier",
    "PolicyEngineFactory",
    "PolicyReport",
    "export_findings_to_excel",
    "export_findings_to_json",
    "format_allow_rule",
    "print_allow_rules",
    "print_findings",
    "run_audit",
]
