"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EndpointsConfig:
    portfolio: str = "/api/demo/portfolio"
    lending_pools: str = "/api/demo/lending/pools"
    borrowable_holdings: str = "/api/demo/borrowable-holdings"
    history: str = "/api/demo/portfolio/history"
    wallet_balances: str = "/api/demo/wallet-balances"
    system_config: str = "/api/system/config"


@dataclass(frozen=True)
class ApiConfig:
    base_url: str = "http://localhost:5000"
    token: str = ""
    request_timeout: int = 30
    endpoints: EndpointsConfig = field(default_factory=EndpointsConfig)


@dataclass(frozen=True)
class PortfolioConfig:
    # None means "ask the backend's system config endpoint"
    demo_mode: bool | None = None
    refresh_interval_seconds: int = 60
    assumed_borrow_ltv: float = 0.5


@dataclass(frozen=True)
class AppConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    portfolio: PortfolioConfig = field(default_factory=PortfolioConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


def parse_bool(value: Any) -> bool | None:
    """Interpret YAML/env booleans; empty or missing means undecided."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("true", "yes", "on", "1"):
        return True
    if text in ("false", "no", "off", "0"):
        return False
    if text == "auto":
        return None
    raise ValueError(f"Invalid boolean value for demo_mode: {value!r}")


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_endpoints(raw: dict[str, Any]) -> EndpointsConfig:
    defaults = EndpointsConfig()
    return EndpointsConfig(
        portfolio=raw.get("portfolio", defaults.portfolio),
        lending_pools=raw.get("lending_pools", defaults.lending_pools),
        borrowable_holdings=raw.get(
            "borrowable_holdings", defaults.borrowable_holdings
        ),
        history=raw.get("history", defaults.history),
        wallet_balances=raw.get("wallet_balances", defaults.wallet_balances),
        system_config=raw.get("system_config", defaults.system_config),
    )


def _build_api(raw: dict[str, Any]) -> ApiConfig:
    return ApiConfig(
        base_url=str(raw.get("base_url", ApiConfig.base_url)).rstrip("/"),
        token=str(raw.get("token", "") or ""),
        request_timeout=int(raw.get("request_timeout", 30)),
        endpoints=_build_endpoints(raw.get("endpoints") or {}),
    )


def _build_portfolio(raw: dict[str, Any]) -> PortfolioConfig:
    return PortfolioConfig(
        demo_mode=parse_bool(raw.get("demo_mode")),
        refresh_interval_seconds=int(raw.get("refresh_interval_seconds", 60)),
        assumed_borrow_ltv=float(raw.get("assumed_borrow_ltv", 0.5)),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        api=_build_api(raw.get("api") or {}),
        portfolio=_build_portfolio(raw.get("portfolio") or {}),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.api.base_url:
        raise ValueError("api.base_url must be configured")
    if not cfg.api.base_url.startswith(("http://", "https://")):
        raise ValueError(
            f"api.base_url must be an http(s) URL, got '{cfg.api.base_url}'"
        )
    if cfg.api.request_timeout < 0:
        raise ValueError("api.request_timeout must be >= 0")

    for name, path in vars(cfg.api.endpoints).items():
        if not path.startswith("/"):
            raise ValueError(f"Endpoint '{name}' must start with '/', got '{path}'")

    if cfg.portfolio.refresh_interval_seconds <= 0:
        raise ValueError("portfolio.refresh_interval_seconds must be positive")
    if not 0 < cfg.portfolio.assumed_borrow_ltv <= 1:
        raise ValueError("portfolio.assumed_borrow_ltv must be in (0, 1]")
