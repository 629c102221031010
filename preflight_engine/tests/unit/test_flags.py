"""Unit tests for the --preflight command-line binding."""

from __future__ import annotations

from typing import Any

import click
import pytest
from click.testing import CliRunner

from preflight_engine.checks.base import Check, FuncCheck
from preflight_engine.checks.flags import PREFLIGHT_FLAG, RegistryParamType, add_flags, usage
from preflight_engine.checks.models import RunContext
from preflight_engine.checks.registry import Registry

runner = CliRunner()


async def _noop(context: RunContext, change_graph: Any) -> None:
    return None


class _LevelCheck(Check):
    def set_config(self, config: dict[str, Any]) -> None:
        if "level" not in config:
            raise ValueError("level is required")
        super().set_config(config)

    async def run(self, context: RunContext, change_graph: Any) -> None:
        return None


@pytest.fixture
def registry() -> Registry:
    return Registry(
        {
            "ownershipCheck": FuncCheck(_noop, enabled=True),
            "labelCheck": FuncCheck(_noop, enabled=False),
        }
    )


def _make_command(registry: Registry) -> click.Command:
    @click.command()
    def apply() -> None:
        click.echo(registry.render())

    registry.add_flags(apply)
    return apply


# ---------------------------------------------------------------------------
# Help text
# ---------------------------------------------------------------------------


class TestUsage:
    def test_usage_lists_sorted_names(self, registry: Registry):
        assert usage(registry) == (
            "preflight checks to run. Available preflight checks are [labelCheck,ownershipCheck]"
        )

    def test_usage_empty_registry(self):
        assert usage(Registry()).endswith("[]")

    def test_help_lists_checks(self, registry: Registry):
        result = runner.invoke(_make_command(registry), ["--help"])
        assert result.exit_code == 0
        assert f"--{PREFLIGHT_FLAG}" in result.output
        assert "labelCheck,ownershipCheck" in result.output


# ---------------------------------------------------------------------------
# Binding
# ---------------------------------------------------------------------------


class TestAddFlags:
    def test_adds_exactly_one_option(self, registry: Registry):
        command = click.Command("apply", callback=lambda: None)
        add_flags(registry, command)
        opts = [p for p in command.params if "--preflight" in getattr(p, "opts", ())]
        assert len(opts) == 1
        assert isinstance(opts[0].type, RegistryParamType)

    def test_duplicate_binding_rejected(self, registry: Registry):
        command = click.Command("apply", callback=lambda: None)
        add_flags(registry, command)
        with pytest.raises(ValueError, match="already has"):
            add_flags(registry, command)

    def test_flag_omitted_keeps_defaults(self, registry: Registry):
        result = runner.invoke(_make_command(registry), [])
        assert result.exit_code == 0
        assert result.output.strip() == "labelCheck=false,ownershipCheck=true"
        assert registry.config is None

    def test_flag_triggers_parse(self, registry: Registry):
        result = runner.invoke(
            _make_command(registry),
            ["--preflight", '{"labelCheck": {"enabled": "true", "labels": ["team"]}}'],
        )
        assert result.exit_code == 0
        assert result.output.strip() == "labelCheck=true,ownershipCheck=true"
        assert registry.get("labelCheck").config == {"enabled": "true", "labels": ["team"]}

    def test_unknown_check_is_usage_error(self, registry: Registry):
        result = runner.invoke(_make_command(registry), ["--preflight", '{"nope": {}}'])
        assert result.exit_code == 2
        assert "unknown preflight check" in result.output
        assert registry.render() == "labelCheck=false,ownershipCheck=true"

    def test_malformed_json_is_usage_error(self, registry: Registry):
        result = runner.invoke(_make_command(registry), ["--preflight", "{not json"])
        assert result.exit_code == 2
        assert "Invalid JSON" in result.output

    def test_malformed_enabled_is_usage_error(self, registry: Registry):
        result = runner.invoke(
            _make_command(registry),
            ["--preflight", '{"labelCheck": {"enabled": "maybe"}}'],
        )
        assert result.exit_code == 2
        assert registry.get("labelCheck").enabled is False

    def test_rejected_check_config_is_usage_error(self):
        registry = Registry({"a": _LevelCheck(), "b": _LevelCheck()})
        result = runner.invoke(
            _make_command(registry),
            ["--preflight", '{"a": {"level": 1, "enabled": "true"}, "b": {}}'],
        )
        assert result.exit_code == 2
        assert "unable to parse config for" in result.output
        assert registry.render() == "a=false,b=false"
        assert registry.get("a").config == {}


class TestRegistryParamType:
    def test_convert_returns_registry(self, registry: Registry):
        param_type = RegistryParamType(registry)
        assert param_type.convert('{"labelCheck": {"enabled": "1"}}', None, None) is registry
        assert registry.get("labelCheck").enabled is True

    def test_convert_registry_passthrough(self, registry: Registry):
        param_type = RegistryParamType(registry)
        assert param_type.convert(registry, None, None) is registry
        assert registry.config is None

    def test_convert_failure_raises_bad_parameter(self, registry: Registry):
        param_type = RegistryParamType(registry)
        with pytest.raises(click.BadParameter):
            param_type.convert("[]", None, None)
