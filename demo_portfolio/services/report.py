"""Text and JSON renderings of a portfolio snapshot."""
from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from typing import Any

from ..models import Snapshot, WalletBalances


def _now_str() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _money(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def build_balances_report(wallets: WalletBalances) -> str:
    lines = [
        f"  {w.name} ({w.symbol}): {_money(w.balance)}"
        for w in (wallets.usdc, wallets.btc, wallets.parco)
    ]
    return "💰 Wallet Balances\n\n" + "\n".join(lines) + f"\n  Total: {_money(wallets.total)}"


def build_snapshot_report(snapshot: Snapshot) -> str:
    """Human-readable portfolio report for the CLI."""
    s = snapshot.summary

    holdings = [
        f"  {p.title}: {p.quantity:g} tokens ({p.locked_quantity:g} locked) · "
        f"{_money(p.current_value)} · {p.change:+.2f}%"
        for p in snapshot.properties
    ] or ["  No property holdings."]

    lending = [
        f"  {lp.pool_name}: {_money(lp.deposited)} @ {lp.apy:.2f}% APY"
        f" (+{_money(lp.accrued_yield)})"
        for lp in snapshot.lending_positions
    ] or ["  No lending deposits."]

    borrows = [
        f"  {bp.property_name}: {bp.locked_tokens:g} tokens locked · "
        f"{_money(bp.borrowed_amount)} borrowed · LTV {bp.ltv:.0f}%"
        for bp in snapshot.borrow_positions
    ] or ["  No borrow positions."]

    chart = " → ".join(f"{pt.name} {_money(pt.value)}" for pt in snapshot.chart_data)
    refreshed = (
        snapshot.last_refresh.strftime("%Y-%m-%d %H:%M:%S")
        if snapshot.last_refresh
        else "never"
    )

    return (
        f"📊 Demo Portfolio\n"
        f"\n"
        f"Total Balance: {_money(s.total_balance)}\n"
        f"  Properties: {_money(s.total_property_value)}\n"
        f"  Crypto: {_money(s.total_crypto_value)}\n"
        f"  Lending: {_money(s.total_lending_deposits)}\n"
        f"Invested: {_money(s.total_invested)}\n"
        f"Net Gains: {_money(s.net_gains)} ({s.net_gains_percent:+.2f}%)\n"
        f"Rent Earned: {_money(s.total_rent_earned)} · Yield: {_money(s.total_accrued_yield)}\n"
        f"Borrowed: {_money(s.total_borrowed)} · Locked: {_money(s.total_locked_value)}\n"
        f"\n"
        f"Holdings\n" + "\n".join(holdings) + "\n"
        f"\n"
        f"Lending\n" + "\n".join(lending) + "\n"
        f"\n"
        f"Borrowing\n" + "\n".join(borrows) + "\n"
        f"\n"
        f"History: {chart or '—'}\n"
        f"\n"
        f"Last refresh: {refreshed} · Report: {_now_str()} UTC"
    )


def snapshot_to_dict(snapshot: Snapshot) -> dict[str, Any]:
    """JSON-ready dict; holdings carry their computed available quantity."""
    data = dataclasses.asdict(snapshot)
    for raw, holding in zip(data["properties"], snapshot.properties):
        raw["available_quantity"] = holding.available_quantity
    data["last_refresh"] = (
        snapshot.last_refresh.isoformat() if snapshot.last_refresh else None
    )
    return data
