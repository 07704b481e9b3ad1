"""Pure normalization functions for backend records — no I/O.

Every source endpoint describes holdings with its own key names. Each
canonical field is resolved from an ordered list of extractors; the first
one yielding a usable value wins, and the last entry is always a safe
default, so normalization degrades but never fails.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Callable, Iterable, Mapping

from ..models import (
    DEFAULT_WALLETS,
    BorrowPosition,
    ChartDataPoint,
    LendingPosition,
    PropertyHolding,
    WalletBalance,
    WalletBalances,
)

logger = logging.getLogger(__name__)

UNKNOWN_PROPERTY = "Unknown Property"
DEFAULT_ASSUMED_LTV = 0.5

# extractor(raw_record, resolved_so_far) -> value or None
Extractor = Callable[[Mapping[str, Any], Mapping[str, Any]], Any]
FieldRule = tuple[str, tuple[Extractor, ...]]


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def to_number(value: Any) -> float | None:
    """Coerce ints, floats and numeric strings; anything else is absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


# ---------------------------------------------------------------------------
# Extractor builders
# ---------------------------------------------------------------------------


def number_key(key: str) -> Extractor:
    """Numeric value stored under ``key``."""
    return lambda raw, _resolved: to_number(raw.get(key))


def text_key(key: str) -> Extractor:
    """Non-empty text stored under ``key``."""
    return lambda raw, _resolved: to_text(raw.get(key))


def resolved(name: str) -> Extractor:
    """Reuse a canonical field resolved earlier in the table."""
    return lambda _raw, done: done.get(name)


def product(left: str, right: str) -> Extractor:
    """Derive a value from two already-resolved fields."""
    return lambda _raw, done: done[left] * done[right]


def constant(value: Any) -> Extractor:
    return lambda _raw, _resolved: value


def resolve_field(
    raw: Mapping[str, Any],
    extractors: Iterable[Extractor],
    done: Mapping[str, Any] | None = None,
) -> Any:
    """Return the first non-None value produced by ``extractors``."""
    done = done if done is not None else {}
    for extractor in extractors:
        value = extractor(raw, done)
        if value is not None:
            return value
    return None


# Order matters: later rules may depend on fields resolved above them.
HOLDING_FIELDS: tuple[FieldRule, ...] = (
    ("id", (text_key("id"), constant(""))),
    ("property_id", (text_key("propertyId"), text_key("id"), constant(""))),
    (
        "title",
        (
            text_key("title"),
            text_key("propertyName"),
            text_key("name"),
            constant(UNKNOWN_PROPERTY),
        ),
    ),
    ("quantity", (number_key("tokensOwned"), number_key("quantity"), constant(0.0))),
    (
        "token_price",
        (
            number_key("currentPrice"),
            number_key("tokenPrice"),
            number_key("averageCost"),
            constant(0.0),
        ),
    ),
    (
        "average_cost",
        (number_key("avgCost"), number_key("averageCost"), resolved("token_price")),
    ),
    ("total_invested", (number_key("totalInvested"), product("quantity", "average_cost"))),
    (
        "current_value",
        (
            number_key("totalValue"),
            number_key("currentValue"),
            product("quantity", "token_price"),
        ),
    ),
    (
        "locked_quantity",
        (
            number_key("lockedTokens"),
            number_key("demoLockedQuantity"),
            number_key("lockedQuantity"),
            constant(0.0),
        ),
    ),
    ("rental_yield", (number_key("rentalYield"), number_key("apy"), constant(0.0))),
    ("image", (text_key("image"), constant(""))),
    ("location", (text_key("location"), constant(""))),
    ("change", (number_key("change"), constant(0.0))),
)

# Clamped right after resolution so derived fields never see negatives.
_NON_NEGATIVE = frozenset({"quantity", "token_price", "average_cost"})


# ---------------------------------------------------------------------------
# Holdings
# ---------------------------------------------------------------------------


def normalize_holding(raw: Mapping[str, Any]) -> PropertyHolding:
    """Map one raw holding record from any endpoint to a PropertyHolding."""
    if not isinstance(raw, Mapping):
        raw = {}

    done: dict[str, Any] = {}
    for name, extractors in HOLDING_FIELDS:
        value = resolve_field(raw, extractors, done)
        if name in _NON_NEGATIVE:
            value = max(0.0, value)
        done[name] = value

    done["locked_quantity"] = min(max(0.0, done["locked_quantity"]), done["quantity"])

    return PropertyHolding(
        **done,
        is_demo_holding=raw.get("isDemoHolding") is not False,
    )


def normalize_holdings(raw_records: Any) -> tuple[PropertyHolding, ...]:
    if not isinstance(raw_records, list):
        return ()
    return tuple(normalize_holding(r) for r in raw_records if isinstance(r, Mapping))


# ---------------------------------------------------------------------------
# Wallets
# ---------------------------------------------------------------------------


def _normalize_wallet(raw: Any, default: WalletBalance) -> WalletBalance:
    if not isinstance(raw, Mapping):
        return default
    balance = to_number(raw.get("balance"))
    return WalletBalance(
        name=to_text(raw.get("name")) or default.name,
        symbol=to_text(raw.get("symbol")) or default.symbol,
        balance=max(0.0, balance) if balance is not None else 0.0,
    )


def normalize_wallet_balances(raw: Any) -> WalletBalances:
    """Fill any missing or malformed wallet with its zero placeholder."""
    if not isinstance(raw, Mapping):
        raw = {}
    return WalletBalances(
        **{
            key: _normalize_wallet(raw.get(key), default)
            for key, default in DEFAULT_WALLETS.items()
        }
    )


# ---------------------------------------------------------------------------
# Lending / borrowing
# ---------------------------------------------------------------------------


def _unwrap_list(raw: Any, key: str) -> list[Any]:
    """Accept either a bare list or ``{key: [...]}``."""
    if isinstance(raw, Mapping):
        raw = raw.get(key)
    return raw if isinstance(raw, list) else []


def lending_positions_from_pools(raw: Any) -> tuple[LendingPosition, ...]:
    """Positions for pools the user has deposited into; others are excluded."""
    positions: list[LendingPosition] = []
    for pool in _unwrap_list(raw, "pools"):
        if not isinstance(pool, Mapping):
            continue
        deposit = to_number(pool.get("userDeposit")) or 0.0
        if deposit <= 0:
            continue
        positions.append(
            LendingPosition(
                pool_id=to_text(pool.get("id")) or "",
                pool_name=to_text(pool.get("name")) or "",
                deposited=deposit,
                accrued_yield=max(0.0, to_number(pool.get("accruedYield")) or 0.0),
                apy=to_number(pool.get("apy")) or 0.0,
            )
        )
    return tuple(positions)


def borrow_positions_from_holdings(
    raw: Any, assumed_ltv: float = DEFAULT_ASSUMED_LTV
) -> tuple[BorrowPosition, ...]:
    """Borrow positions for holdings with locked collateral.

    When the backend omits ``borrowedAmount`` the loan is estimated as
    ``lockedTokens * tokenPrice * assumed_ltv``. The estimate is display-only.
    """
    positions: list[BorrowPosition] = []
    for holding in _unwrap_list(raw, "holdings"):
        if not isinstance(holding, Mapping):
            continue
        locked = to_number(holding.get("lockedTokens")) or 0.0
        if locked <= 0:
            continue
        price = max(0.0, to_number(holding.get("tokenPrice")) or 0.0)
        borrowed = to_number(holding.get("borrowedAmount"))
        if borrowed is None:
            borrowed = locked * price * assumed_ltv
        ltv = to_number(holding.get("ltv"))
        positions.append(
            BorrowPosition(
                property_id=resolve_field(
                    holding, (text_key("propertyId"), text_key("id"), constant(""))
                ),
                property_name=resolve_field(
                    holding,
                    (
                        text_key("title"),
                        text_key("propertyName"),
                        text_key("name"),
                        constant(UNKNOWN_PROPERTY),
                    ),
                ),
                locked_tokens=locked,
                borrowed_amount=borrowed,
                ltv=ltv if ltv is not None else assumed_ltv * 100,
            )
        )
    return tuple(positions)


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


def normalize_chart_data(raw: Any) -> tuple[ChartDataPoint, ...]:
    """Usable points of a backend history series; empty when unusable."""
    points: list[ChartDataPoint] = []
    for item in _unwrap_list(raw, "chartData"):
        if not isinstance(item, Mapping):
            continue
        value = to_number(item.get("value"))
        if value is None:
            logger.debug("Dropping chart point without numeric value: %r", item)
            continue
        points.append(
            ChartDataPoint(
                name=to_text(item.get("name")) or "",
                value=value,
                date=to_text(item.get("date")),
            )
        )
    return tuple(points)
