"""Fallback portfolio value series.

When the backend has no usable history, the chart gets a straight line from
the invested capital to the current total balance over the last six months.
This is a presentation placeholder, NOT historical data and NOT a projection:
its only guarantee is that the final point equals the headline balance.
"""
from __future__ import annotations

import calendar
import logging
from datetime import datetime
from typing import Any

from ..models import ChartDataPoint, PortfolioSummary
from .normalizer import normalize_chart_data

logger = logging.getLogger(__name__)

HISTORY_POINTS = 6


def _months_back(now: datetime, count: int) -> tuple[int, int]:
    """(year, month) that lies ``count`` months before ``now``."""
    index = now.year * 12 + (now.month - 1) - count
    return index // 12, index % 12 + 1


def synthesize_history(
    total_invested: float,
    total_balance: float,
    now: datetime | None = None,
) -> tuple[ChartDataPoint, ...]:
    """Six monthly points interpolated linearly up to ``total_balance``."""
    now = now or datetime.now()
    delta = total_balance - total_invested

    points: list[ChartDataPoint] = []
    for i in range(HISTORY_POINTS):
        year, month = _months_back(now, HISTORY_POINTS - 1 - i)
        step = i + 1
        # last point pinned so float error cannot drift from the headline value
        value = (
            total_balance
            if step == HISTORY_POINTS
            else total_invested + delta * step / HISTORY_POINTS
        )
        points.append(
            ChartDataPoint(
                name=calendar.month_abbr[month],
                value=value,
                date=f"{year:04d}-{month:02d}-01",
            )
        )
    return tuple(points)


def resolve_chart_data(
    history: Any,
    summary: PortfolioSummary,
    now: datetime | None = None,
) -> tuple[ChartDataPoint, ...]:
    """Backend series when usable, otherwise the synthesized placeholder."""
    points = normalize_chart_data(history)
    if points:
        return points
    logger.debug("No usable portfolio history, synthesizing placeholder series")
    return synthesize_history(summary.total_invested, summary.total_balance, now)
