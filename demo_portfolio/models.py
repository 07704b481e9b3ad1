"""Data models — all frozen (immutable)."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


class RefreshState(enum.Enum):
    """Aggregation cycle state: IDLE -> LOADING -> (SUCCESS | FAILED).

    The outcome is kept until the next cycle starts; turning demo mode off
    or cancelling a cycle returns to IDLE.
    """

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class WalletBalance:
    """Single named crypto balance."""

    name: str
    symbol: str
    balance: float = 0.0


@dataclass(frozen=True)
class WalletBalances:
    """The three wallet balances, always fully populated."""

    usdc: WalletBalance
    btc: WalletBalance
    parco: WalletBalance

    @property
    def total(self) -> float:
        return self.usdc.balance + self.btc.balance + self.parco.balance


DEFAULT_WALLETS: dict[str, WalletBalance] = {
    "usdc": WalletBalance(name="USDC", symbol="USDC", balance=0.0),
    "btc": WalletBalance(name="Bitcoin", symbol="BTC", balance=0.0),
    "parco": WalletBalance(name="Parco Token", symbol="PARCO", balance=0.0),
}


def default_wallet_balances() -> WalletBalances:
    """Zero-balance placeholders for every wallet."""
    return WalletBalances(**DEFAULT_WALLETS)


@dataclass(frozen=True)
class PropertyHolding:
    """Canonical fractional position in one tokenized property."""

    id: str
    property_id: str
    title: str
    quantity: float = 0.0
    average_cost: float = 0.0
    total_invested: float = 0.0
    current_value: float = 0.0
    locked_quantity: float = 0.0
    rental_yield: float = 0.0
    token_price: float = 0.0
    image: str = ""
    location: str = ""
    is_demo_holding: bool = True
    change: float = 0.0

    @property
    def available_quantity(self) -> float:
        return self.quantity - self.locked_quantity


@dataclass(frozen=True)
class LendingPosition:
    """User deposit in a lending pool."""

    pool_id: str
    pool_name: str
    deposited: float
    accrued_yield: float = 0.0
    apy: float = 0.0


@dataclass(frozen=True)
class BorrowPosition:
    """Borrow collateralised by locked property tokens."""

    property_id: str
    property_name: str
    locked_tokens: float
    borrowed_amount: float
    ltv: float


@dataclass(frozen=True)
class PortfolioSummary:
    """Portfolio-level metrics, fully derived from the collections."""

    total_balance: float = 0.0
    total_property_value: float = 0.0
    total_crypto_value: float = 0.0
    total_invested: float = 0.0
    net_gains: float = 0.0
    net_gains_percent: float = 0.0
    total_rent_earned: float = 0.0
    total_lending_deposits: float = 0.0
    total_accrued_yield: float = 0.0
    total_borrowed: float = 0.0
    total_locked_value: float = 0.0


@dataclass(frozen=True)
class ChartDataPoint:
    """One point of the portfolio value series (oldest first)."""

    name: str
    value: float
    date: str | None = None


@dataclass(frozen=True)
class Snapshot:
    """Complete, internally consistent portfolio state of one refresh cycle."""

    summary: PortfolioSummary = field(default_factory=PortfolioSummary)
    wallet_balances: WalletBalances = field(default_factory=default_wallet_balances)
    properties: tuple[PropertyHolding, ...] = ()
    lending_positions: tuple[LendingPosition, ...] = ()
    borrow_positions: tuple[BorrowPosition, ...] = ()
    recent_activity: tuple[dict[str, Any], ...] = ()
    chart_data: tuple[ChartDataPoint, ...] = ()
    last_refresh: datetime | None = None

    @classmethod
    def empty(cls) -> Snapshot:
        return cls()
