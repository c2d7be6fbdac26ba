"""Tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from lsss import Config, config
from lsss.config import _int_env


def test_defaults() -> None:
    cfg = Config(max_leaves=4096, max_gate_width=1024)
    assert cfg.validate() == []


def test_module_config_is_a_config() -> None:
    assert isinstance(config, Config)
    assert config.max_leaves >= 1


def test_int_env_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LSSS_TEST_LIMIT", "17")
    assert _int_env("LSSS_TEST_LIMIT", "3") == 17
    monkeypatch.delenv("LSSS_TEST_LIMIT")
    assert _int_env("LSSS_TEST_LIMIT", "3") == 3


def test_int_env_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LSSS_TEST_LIMIT", "lots")
    with pytest.raises(ValueError, match="LSSS_TEST_LIMIT"):
        _int_env("LSSS_TEST_LIMIT", "3")


@pytest.mark.parametrize(
    "kwargs", [{"max_leaves": 0}, {"max_gate_width": 0}, {"max_leaves": -5}],
)
def test_validate_rejects_non_positive(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        Config(**kwargs).validate()


def test_validate_warns_on_wide_gates() -> None:
    warnings = Config(max_leaves=10, max_gate_width=20).validate()
    assert len(warnings) == 1
    assert "LSSS_MAX_GATE_WIDTH" in warnings[0]


def test_config_is_frozen() -> None:
    with pytest.raises(AttributeError):
        config.max_leaves = 1  # type: ignore[misc]
