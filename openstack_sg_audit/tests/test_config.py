"""Tests for TOML configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from openstack_sg_audit.config import load_config, parse_config
from openstack_sg_audit.errors import ConfigError

SAMPLE = """
dry_run = true
slack_channel = "#security"
username = "sg-audit"
icon_emoji = ":rotating_light:"
prefix_message = "Open security groups:"
suffix_message = "Please fix."

[[rules]]
tenant = "Alpha"
sg = "web"
port = ["80", 443, "8000-8080"]

[[policies]]
policy = "policies/stale.rego"
data = "policies/data.json"
prefix_message = "Stale groups:"

[[policies]]
name = "custom"
query = "x = data.custom.deny"
"""


def test_load_config_reads_all_sections(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(SAMPLE, encoding="utf-8")

    config = load_config(path)

    assert config.dry_run is True
    assert config.slack_channel == "#security"
    assert config.prefix_message == "Open security groups:"
    rule = config.rules[0]
    assert (rule.tenant_name, rule.security_group_name) == ("Alpha", "web")
    assert rule.ports == ["80", "443", "8000-8080"]
    assert rule.tenant_id is None

    stale, custom = config.policies
    assert stale.name == "policies/stale.rego"
    assert stale.paths == ["policies/stale.rego", "policies/data.json"]
    assert stale.query == "x = data.example.allow"
    assert custom.name == "custom"
    assert custom.paths == []
    assert custom.query == "x = data.custom.deny"


def test_empty_config_uses_defaults() -> None:
    config = parse_config({})

    assert config.rules == []
    assert config.policies == []
    assert config.dry_run is False


def test_unnamed_policy_without_files_is_numbered() -> None:
    config = parse_config({"policies": [{}, {}]})

    assert [policy.name for policy in config.policies] == ["policy-1", "policy-2"]


@pytest.mark.parametrize(
    "raw",
    [
        {"rules": [{"tenant": "Alpha"}]},
        {"rules": [{"tenant": "Alpha", "sg": "web", "port": {"from": 1}}]},
        {"rules": {"tenant": "Alpha"}},
        {"slack_channel": 5},
    ],
)
def test_malformed_config_is_rejected(raw) -> None:
    with pytest.raises(ConfigError):
        parse_config(raw)


def test_missing_and_invalid_files(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.toml")

    broken = tmp_path / "broken.toml"
    broken.write_text("rules = [", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(broken)
