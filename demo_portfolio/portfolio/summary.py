"""Portfolio summary calculator — pure, deterministic, no I/O."""
from __future__ import annotations

from typing import Sequence

from ..models import (
    BorrowPosition,
    LendingPosition,
    PortfolioSummary,
    PropertyHolding,
    WalletBalances,
)


def calc_net_gains_percent(net_gains: float, total_invested: float) -> float:
    """Net gains as a percentage of invested capital; 0 when nothing invested."""
    if total_invested <= 0:
        return 0.0
    return (net_gains / total_invested) * 100


def calculate_summary(
    properties: Sequence[PropertyHolding],
    wallets: WalletBalances,
    lending_positions: Sequence[LendingPosition],
    borrow_positions: Sequence[BorrowPosition],
    total_rent_earned: float = 0.0,
) -> PortfolioSummary:
    """Fold the normalized collections into portfolio-level metrics.

    Empty collections contribute zero, so a brand-new account yields an
    all-zero summary.
    """
    total_property_value = sum(p.current_value for p in properties)
    total_invested = sum(p.total_invested for p in properties)
    total_locked_value = sum(p.locked_quantity * p.token_price for p in properties)
    total_crypto_value = (
        wallets.usdc.balance + wallets.btc.balance + wallets.parco.balance
    )
    total_lending_deposits = sum(lp.deposited for lp in lending_positions)
    total_accrued_yield = sum(lp.accrued_yield for lp in lending_positions)
    total_borrowed = sum(bp.borrowed_amount for bp in borrow_positions)

    net_gains = (
        total_property_value - total_invested + total_accrued_yield + total_rent_earned
    )

    return PortfolioSummary(
        total_balance=total_property_value + total_crypto_value + total_lending_deposits,
        total_property_value=total_property_value,
        total_crypto_value=total_crypto_value,
        total_invested=total_invested,
        net_gains=net_gains,
        net_gains_percent=calc_net_gains_percent(net_gains, total_invested),
        total_rent_earned=total_rent_earned,
        total_lending_deposits=total_lending_deposits,
        total_accrued_yield=total_accrued_yield,
        total_borrowed=total_borrowed,
        total_locked_value=total_locked_value,
    )
