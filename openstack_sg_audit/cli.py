"""Command line interface for the OpenStack security group audit."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from .allowlist import DEFAULT_ALLOW_LIST_KEY, DEFAULT_REDIS_URL, fetch_allowed_groups, redis_client
from .config import load_config
from .core import (
    export_findings_to_excel,
    export_findings_to_json,
    print_allow_rules,
    print_findings,
    run_audit,
)
from .errors import AuditError, ConfigError
from .inventory import connect, fetch_inventory
from .notifier import SlackNotifier
from .policy_engine import OpaPolicyEngine


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Return parsed command line arguments."""

    parser = argparse.ArgumentParser(
        description="Audit OpenStack security groups for internet exposure and policy violations."
    )
    parser.add_argument("--config", default="config.toml", help="Path to the TOML configuration")
    parser.add_argument("--cloud", default=None, help="Cloud name from clouds.yaml")
    parser.add_argument("--region", default=None, help="OpenStack region name")
    parser.add_argument(
        "--cacert", default=os.getenv("OS_CACERT"), help="CA bundle used to verify the API"
    )
    parser.add_argument("--cert", default=os.getenv("OS_CERT"), help="Client certificate")
    parser.add_argument("--key", default=os.getenv("OS_KEY"), help="Client certificate key")
    parser.add_argument(
        "--redis-url",
        default=os.getenv("REDIS_URL") or DEFAULT_REDIS_URL,
        help="Redis holding the temporary allow list (host:port or redis:// URL)",
    )
    parser.add_argument(
        "--allow-list-key",
        default=DEFAULT_ALLOW_LIST_KEY,
        help="Redis list with temporarily allowed security group ids",
    )
    parser.add_argument("--opa", dest="opa_binary", default="opa", help="Path to the opa executable")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Evaluate security groups without posting to Slack",
    )
    parser.add_argument(
        "--suggest-rules",
        action="store_true",
        help="Print [[rules]] snippets that would allow each open-access finding",
    )
    parser.add_argument("--json", dest="json_path", help="Optional path to export findings as JSON")
    parser.add_argument(
        "--excel",
        dest="excel_path",
        help="Optional path to export findings as an Excel workbook (.xlsx)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point used by ``python -m openstack_sg_audit``."""

    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
        if args.dry_run:
            config.dry_run = True

        notifier = None
        if not config.dry_run:
            token = os.getenv("SLACK_TOKEN")
            if not token:
                raise ConfigError("SLACK_TOKEN must be set unless running with --dry-run")
            if not config.slack_channel:
                raise ConfigError("'slack_channel' must be configured unless running with --dry-run")
            notifier = SlackNotifier.from_token(
                token,
                config.slack_channel,
                username=config.username or None,
                icon_emoji=config.icon_emoji or None,
            )

        allow_list_client = redis_client(args.redis_url)

        def load_inventory():
            conn = connect(
                args.cloud, args.region, cacert=args.cacert, cert=args.cert, key=args.key
            )
            return fetch_inventory(conn)

        results = run_audit(
            config,
            load_inventory,
            lambda: fetch_allowed_groups(allow_list_client, args.allow_list_key),
            lambda policy: OpaPolicyEngine.from_policy(policy, binary=args.opa_binary),
            notifier,
        )
    except AuditError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    findings = results.findings
    print_findings(findings)

    if args.suggest_rules:
        print_allow_rules(findings)

    if args.json_path:
        export_findings_to_json(findings, args.json_path)
        print(f"Findings exported to {args.json_path}")

    if args.excel_path:
        try:
            path = export_findings_to_excel(findings, args.excel_path)
        except RuntimeError as exc:
            print(f"Failed to export Excel report: {exc}", file=sys.stderr)
        else:
            print(f"Excel report written to {path}")

    return 0


__all__ = ["main", "parse_args"]
