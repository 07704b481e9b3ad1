"""Unit tests for config loading, env interpolation, and validation."""
from __future__ import annotations

from pathlib import Path

import pytest

from demo_portfolio.config import (
    ApiConfig,
    AppConfig,
    EndpointsConfig,
    PortfolioConfig,
    _interpolate_env,
    parse_bool,
    load_config,
)


def _write(tmp_path: Path, content: str) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(content)
    return cfg_file


class TestInterpolateEnv:
    def test_simple_substitution(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_VAR", "hello")
        assert _interpolate_env("${MY_VAR}") == "hello"

    def test_missing_var_becomes_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NONEXISTENT_VAR_XYZ", raising=False)
        assert _interpolate_env("${NONEXISTENT_VAR_XYZ}") == ""

    def test_nested_dict(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOK", "secret")
        result = _interpolate_env({"key": "${TOK}", "plain": "text"})
        assert result == {"key": "secret", "plain": "text"}

    def test_nested_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("A", "x")
        assert _interpolate_env(["${A}", "y"]) == ["x", "y"]

    def test_non_string_passthrough(self) -> None:
        assert _interpolate_env(42) == 42
        assert _interpolate_env(True) is True


class TestParseBool:
    @pytest.mark.parametrize("value", [True, "true", "Yes", "1", "on"])
    def test_truthy(self, value: object) -> None:
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", [False, "false", "NO", "0", "off"])
    def test_falsy(self, value: object) -> None:
        assert parse_bool(value) is False

    @pytest.mark.parametrize("value", [None, "", "auto"])
    def test_undecided(self, value: object) -> None:
        assert parse_bool(value) is None

    def test_garbage_raises(self) -> None:
        with pytest.raises(ValueError, match="demo_mode"):
            parse_bool("maybe")


class TestLoadConfig:
    def test_loads_valid_yaml(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        assert isinstance(cfg, AppConfig)
        assert cfg.api.base_url == "https://api.example.com"
        assert cfg.api.token == "tok"
        assert cfg.api.request_timeout == 15
        assert cfg.api.endpoints.history == "/api/demo/history"
        assert cfg.api.endpoints.portfolio == "/api/demo/portfolio"
        assert cfg.portfolio.demo_mode is True
        assert cfg.portfolio.refresh_interval_seconds == 45
        assert cfg.portfolio.assumed_borrow_ltv == 0.4

    def test_defaults_for_missing_sections(self, tmp_path: Path) -> None:
        cfg = load_config(_write(tmp_path, "api:\n  base_url: http://localhost:5000\n"))
        assert cfg.api.endpoints == EndpointsConfig()
        assert cfg.portfolio == PortfolioConfig()

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.yaml")

    def test_env_interpolation_in_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TEST_BASE_URL", "https://demo.example.com")
        monkeypatch.setenv("TEST_DEMO_MODE", "false")
        cfg = load_config(
            _write(
                tmp_path,
                'api:\n  base_url: "${TEST_BASE_URL}"\n'
                'portfolio:\n  demo_mode: "${TEST_DEMO_MODE}"\n',
            )
        )
        assert cfg.api.base_url == "https://demo.example.com"
        assert cfg.portfolio.demo_mode is False


class TestValidation:
    def test_empty_base_url_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="base_url must be configured"):
            load_config(_write(tmp_path, 'api:\n  base_url: ""\n'))

    def test_non_http_base_url_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="http"):
            load_config(_write(tmp_path, "api:\n  base_url: ftp://x\n"))

    def test_relative_endpoint_raises(self, tmp_path: Path) -> None:
        yaml_content = """\
api:
  base_url: http://localhost
  endpoints:
    portfolio: api/demo/portfolio
"""
        with pytest.raises(ValueError, match="portfolio"):
            load_config(_write(tmp_path, yaml_content))

    def test_negative_timeout_raises(self, tmp_path: Path) -> None:
        yaml_content = "api:\n  base_url: http://localhost\n  request_timeout: -1\n"
        with pytest.raises(ValueError, match="request_timeout"):
            load_config(_write(tmp_path, yaml_content))

    def test_bad_interval_raises(self, tmp_path: Path) -> None:
        yaml_content = """\
api:
  base_url: http://localhost
portfolio:
  refresh_interval_seconds: 0
"""
        with pytest.raises(ValueError, match="refresh_interval_seconds"):
            load_config(_write(tmp_path, yaml_content))

    def test_ltv_out_of_range_raises(self, tmp_path: Path) -> None:
        yaml_content = """\
api:
  base_url: http://localhost
portfolio:
  assumed_borrow_ltv: 1.5
"""
        with pytest.raises(ValueError, match="assumed_borrow_ltv"):
            load_config(_write(tmp_path, yaml_content))


class TestFrozenConfigs:
    def test_api_config_immutable(self) -> None:
        c = ApiConfig()
        with pytest.raises(AttributeError):
            c.token = "x"  # type: ignore[misc]

    def test_portfolio_config_immutable(self) -> None:
        p = PortfolioConfig()
        with pytest.raises(AttributeError):
            p.assumed_borrow_ltv = 0.9  # type: ignore[misc]
