"""Tests for rh_common.config.env parsing utilities."""

from pathlib import Path

import pytest

from rh_common.config.env import (
    parse_bool_env,
    parse_float_env,
    parse_path_env,
)


pytestmark = pytest.mark.unit_common


class TestParseBoolEnv:
    """Tests for parse_bool_env function."""

    def test_returns_none_for_none(self) -> None:
        assert parse_bool_env(None) is None

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes", "on"])
    def test_returns_true_for_truthy_values(self, value: str) -> None:
        assert parse_bool_env(value) is True

    @pytest.mark.parametrize("value", ["0", "false", "no", "off", "random", ""])
    def test_returns_false_for_falsy_values(self, value: str) -> None:
        assert parse_bool_env(value) is False

    def test_strips_whitespace(self) -> None:
        assert parse_bool_env("  1  ") is True


class TestParseFloatEnv:
    def test_parse_float(self) -> None:
        assert parse_float_env("0.5") == 0.5
        assert parse_float_env("5") == 5.0
        assert parse_float_env("abc") is None
        assert parse_float_env(None) is None


class TestParsePathEnv:
    def test_blank_is_unset(self) -> None:
        assert parse_path_env(None) is None
        assert parse_path_env("   ") is None

    def test_returns_path(self) -> None:
        assert parse_path_env(" /var/tmp/logs ") == Path("/var/tmp/logs")
