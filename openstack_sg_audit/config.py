"""Load the audit configuration from a TOML file."""
from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

from .errors import ConfigError
from .models import DEFAULT_QUERY, AllowRule, PolicyDefinition


@dataclass
class AuditConfig:
    """Settings for a single audit run."""

    rules: List[AllowRule] = field(default_factory=list)
    policies: List[PolicyDefinition] = field(default_factory=list)
    dry_run: bool = False
    slack_channel: str = ""
    username: str = ""
    icon_emoji: str = ""
    prefix_message: str = ""
    suffix_message: str = ""


def load_config(path: Union[str, Path]) -> AuditConfig:
    """Read and validate the configuration stored at *path*."""

    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    return parse_config(raw)


def parse_config(raw: Mapping[str, Any]) -> AuditConfig:
    """Build an :class:`AuditConfig` from already decoded TOML data."""

    rules = [_parse_rule(index, entry) for index, entry in enumerate(_tables(raw, "rules"), 1)]
    policies = [
        _parse_policy(index, entry) for index, entry in enumerate(_tables(raw, "policies"), 1)
    ]
    return AuditConfig(
        rules=rules,
        policies=policies,
        dry_run=bool(raw.get("dry_run", False)),
        slack_channel=_string(raw, "slack_channel"),
        username=_string(raw, "username"),
        icon_emoji=_string(raw, "icon_emoji"),
        prefix_message=_string(raw, "prefix_message"),
        suffix_message=_string(raw, "suffix_message"),
    )


def _tables(raw: Mapping[str, Any], key: str) -> List[Dict[str, Any]]:
    value = raw.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise ConfigError(f"'{key}' must be an array of tables ([[{key}]])")
    return value


def _string(raw: Mapping[str, Any], key: str) -> str:
    value = raw.get(key, "")
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string")
    return value


def _parse_rule(index: int, entry: Mapping[str, Any]) -> AllowRule:
    tenant = entry.get("tenant")
    group_name = entry.get("sg")
    if not tenant or not group_name:
        raise ConfigError(f"rules[{index}] requires both 'tenant' and 'sg'")

    ports = entry.get("port", [])
    if isinstance(ports, (str, int)):
        ports = [ports]
    if not isinstance(ports, list):
        raise ConfigError(f"rules[{index}].port must be a list of ports or port ranges")
    return AllowRule(
        tenant_name=str(tenant),
        security_group_name=str(group_name),
        ports=[str(port).strip() for port in ports],
    )


def _parse_policy(index: int, entry: Mapping[str, Any]) -> PolicyDefinition:
    policy = _string(entry, "policy") or None
    data = _string(entry, "data") or None
    name = _string(entry, "name") or policy or f"policy-{index}"
    return PolicyDefinition(
        name=name,
        policy=policy,
        data=data,
        query=_string(entry, "query") or DEFAULT_QUERY,
        prefix_message=_string(entry, "prefix_message"),
        suffix_message=_string(entry, "suffix_message"),
    )


__all__ = ["AuditConfig", "load_config", "parse_config"]
