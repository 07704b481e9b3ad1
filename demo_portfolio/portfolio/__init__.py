"""Normalization, summary and history computations."""
from .history import HISTORY_POINTS, resolve_chart_data, synthesize_history
from .normalizer import (
    HOLDING_FIELDS,
    borrow_positions_from_holdings,
    lending_positions_from_pools,
    normalize_chart_data,
    normalize_holding,
    normalize_holdings,
    normalize_wallet_balances,
    resolve_field,
)
from .summary import calculate_summary

__all__ = [
    "HISTORY_POINTS",
    "HOLDING_FIELDS",
    "borrow_positions_from_holdings",
    "calculate_summary",
    "lending_positions_from_pools",
    "normalize_chart_data",
    "normalize_holding",
    "normalize_holdings",
    "normalize_wallet_balances",
    "resolve_chart_data",
    "resolve_field",
    "synthesize_history",
]
