"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from demo_portfolio.config import (
    ApiConfig,
    AppConfig,
    EndpointsConfig,
    PortfolioConfig,
)
from demo_portfolio.models import (
    BorrowPosition,
    LendingPosition,
    PropertyHolding,
    WalletBalance,
    WalletBalances,
)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_api_config() -> ApiConfig:
    return ApiConfig(
        base_url="https://api.example.com",
        token="test-token",
        request_timeout=10,
        endpoints=EndpointsConfig(),
    )


@pytest.fixture()
def sample_portfolio_config() -> PortfolioConfig:
    return PortfolioConfig(
        demo_mode=True, refresh_interval_seconds=30, assumed_borrow_ltv=0.5
    )


@pytest.fixture()
def sample_app_config(
    sample_api_config: ApiConfig, sample_portfolio_config: PortfolioConfig
) -> AppConfig:
    return AppConfig(api=sample_api_config, portfolio=sample_portfolio_config)


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_wallets() -> WalletBalances:
    return WalletBalances(
        usdc=WalletBalance(name="USDC", symbol="USDC", balance=1000.0),
        btc=WalletBalance(name="Bitcoin", symbol="BTC", balance=250.0),
        parco=WalletBalance(name="Parco Token", symbol="PARCO", balance=50.0),
    )


@pytest.fixture()
def sample_holding() -> PropertyHolding:
    return PropertyHolding(
        id="prop-1",
        property_id="prop-1",
        title="Miami Beach Condo",
        quantity=10.0,
        average_cost=50.0,
        total_invested=500.0,
        current_value=600.0,
        locked_quantity=4.0,
        rental_yield=7.5,
        token_price=60.0,
        location="Miami, FL",
        change=20.0,
    )


@pytest.fixture()
def sample_lending_position() -> LendingPosition:
    return LendingPosition(
        pool_id="pool-1",
        pool_name="USDC-RE Index Pool",
        deposited=2000.0,
        accrued_yield=15.0,
        apy=8.2,
    )


@pytest.fixture()
def sample_borrow_position() -> BorrowPosition:
    return BorrowPosition(
        property_id="prop-1",
        property_name="Miami Beach Condo",
        locked_tokens=4.0,
        borrowed_amount=120.0,
        ltv=50.0,
    )


# ---------------------------------------------------------------------------
# Backend payloads (envelope ``data`` members)
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_portfolio_data() -> dict[str, Any]:
    return {
        "summary": {"totalRentEarned": 20.0},
        "walletBalances": {
            "usdc": {"name": "USDC", "symbol": "USDC", "balance": 1000.0},
            "btc": {"name": "Bitcoin", "symbol": "BTC", "balance": 250.0},
            "parco": {"name": "Parco Token", "symbol": "PARCO", "balance": 50.0},
        },
        "properties": [
            {
                "id": "prop-1",
                "title": "Miami Beach Condo",
                "location": "Miami, FL",
                "image": "https://img.example.com/1.jpg",
                "tokensOwned": 10,
                "lockedTokens": 4,
                "avgCost": 50,
                "currentPrice": 60,
                "totalValue": 600,
                "totalInvested": 500,
                "change": 20,
            },
            {
                "id": "prop-2",
                "propertyName": "Austin Duplex",
                "quantity": 5,
                "tokenPrice": 100,
            },
        ],
        "recentActivity": [
            {"id": "tx-1", "type": "RENT_DISTRIBUTION", "amount": "+ $20.00"},
        ],
    }


@pytest.fixture()
def sample_pools_data() -> list[dict[str, Any]]:
    return [
        {"id": "pool-1", "name": "USDC-RE Index Pool", "apy": 8.2,
         "userDeposit": 2000, "accruedYield": 15},
        {"id": "pool-2", "name": "High Yield Residential", "apy": 12.5,
         "userDeposit": 0, "accruedYield": 0},
    ]


@pytest.fixture()
def sample_borrowable_data() -> dict[str, Any]:
    return {
        "holdings": [
            {"id": "prop-1", "title": "Miami Beach Condo",
             "lockedTokens": 4, "tokenPrice": 60},
            {"id": "prop-2", "title": "Austin Duplex",
             "lockedTokens": 0, "tokenPrice": 100},
        ]
    }


@pytest.fixture()
def sample_history_data() -> dict[str, Any]:
    return {
        "chartData": [
            {"name": "Sep", "value": 1800, "date": "2026-09-01"},
            {"name": "Oct", "value": 2000, "date": "2026-10-01"},
        ]
    }


@pytest.fixture()
def mock_backend(
    sample_portfolio_data: dict[str, Any],
    sample_pools_data: list[dict[str, Any]],
    sample_borrowable_data: dict[str, Any],
    sample_history_data: dict[str, Any],
) -> AsyncMock:
    backend = AsyncMock()
    backend.fetch_portfolio.return_value = sample_portfolio_data
    backend.fetch_lending_pools.return_value = sample_pools_data
    backend.fetch_borrowable_holdings.return_value = sample_borrowable_data
    backend.fetch_portfolio_history.return_value = sample_history_data
    backend.fetch_wallet_balances.return_value = {
        "balances": {
            "usdc": {"name": "USDC", "balance": 900.0},
            "btc": {"name": "Bitcoin", "balance": 300.0},
        }
    }
    backend.fetch_system_config.return_value = {"demoMode": True}
    return backend


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    api:
      base_url: "https://api.example.com/"
      token: "tok"
      request_timeout: 15
      endpoints:
        history: /api/demo/history
    portfolio:
      demo_mode: true
      refresh_interval_seconds: 45
      assumed_borrow_ltv: 0.4
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
