"""Portfolio aggregation — fans out to the demo endpoints and builds snapshots."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from ..config import PortfolioConfig
from ..interfaces.backend import PortfolioBackend
from ..models import (
    BorrowPosition,
    ChartDataPoint,
    LendingPosition,
    PortfolioSummary,
    PropertyHolding,
    RefreshState,
    Snapshot,
    WalletBalances,
)
from ..portfolio import (
    borrow_positions_from_holdings,
    calculate_summary,
    lending_positions_from_pools,
    normalize_holdings,
    normalize_wallet_balances,
    resolve_chart_data,
)
from ..portfolio.normalizer import to_number
from .demo_mode import DemoMode
from .store import SnapshotStore

logger = logging.getLogger(__name__)


async def gather_all(*aws: Awaitable[Any]) -> list[Any]:
    """Wait for every awaitable; if any fails, cancel the rest and re-raise."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        # retrieve sibling outcomes so nothing is reported as unhandled
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class PortfolioOrchestrator:
    """Drives refresh cycles and owns all writes to the snapshot store."""

    def __init__(
        self,
        backend: PortfolioBackend,
        store: SnapshotStore,
        demo_mode: DemoMode,
        config: PortfolioConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._backend = backend
        self._store = store
        self._demo_mode = demo_mode
        self._config = config or PortfolioConfig()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self._state = RefreshState.IDLE
        self._inflight: asyncio.Task[None] | None = None
        self._background: set[asyncio.Task[None]] = set()
        # Bumped whenever demo mode turns off; cycles started under an older
        # generation must not commit.
        self._generation = 0
        self._unsubscribe: Callable[[], None] | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Bind to the demo-mode flag and kick off a refresh if it is on."""
        if self._unsubscribe is None:
            self._unsubscribe = self._demo_mode.subscribe(self._on_mode_change)
        if self._demo_mode.enabled:
            self._schedule_refresh()

    async def close(self) -> None:
        """Unbind from the flag and cancel outstanding work."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        pending = list(self._background)
        if self._inflight is not None:
            pending.append(self._inflight)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._inflight = None

    def _on_mode_change(self, enabled: bool) -> None:
        if enabled:
            self._schedule_refresh()
            return
        self._generation += 1
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        self._inflight = None
        self._state = RefreshState.IDLE
        self._store.reset()

    def _schedule_refresh(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, refresh deferred to caller")
            return
        task = loop.create_task(self.refresh_portfolio())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    # ------------------------------------------------------------------
    # Read surface
    # ------------------------------------------------------------------

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._store.loading

    @property
    def error(self) -> str | None:
        return self._store.error

    @property
    def snapshot(self) -> Snapshot:
        return self._store.snapshot

    @property
    def summary(self) -> PortfolioSummary:
        return self._store.snapshot.summary

    @property
    def wallet_balances(self) -> WalletBalances:
        return self._store.snapshot.wallet_balances

    @property
    def properties(self) -> tuple[PropertyHolding, ...]:
        return self._store.snapshot.properties

    @property
    def lending_positions(self) -> tuple[LendingPosition, ...]:
        return self._store.snapshot.lending_positions

    @property
    def borrow_positions(self) -> tuple[BorrowPosition, ...]:
        return self._store.snapshot.borrow_positions

    @property
    def recent_activity(self) -> tuple[dict[str, Any], ...]:
        return self._store.snapshot.recent_activity

    @property
    def portfolio_chart_data(self) -> tuple[ChartDataPoint, ...]:
        return self._store.snapshot.chart_data

    @property
    def last_refresh(self) -> datetime | None:
        return self._store.snapshot.last_refresh

    # ------------------------------------------------------------------
    # Refresh workflows
    # ------------------------------------------------------------------

    async def refresh_portfolio(self) -> None:
        """Run one full aggregation cycle (or join the one in flight)."""
        if not self._demo_mode.enabled:
            self._store.reset()
            return

        task = self._inflight
        if task is not None and not task.done():
            logger.debug("Refresh already in progress, joining it")
        else:
            task = asyncio.get_running_loop().create_task(
                self._run_cycle(self._generation)
            )
            self._inflight = task

        # asyncio.wait never raises for the task's own cancellation
        await asyncio.wait({task})

    async def refresh_all(self) -> None:
        await self.refresh_portfolio()

    async def refresh_wallet_balances(self) -> None:
        """Update only the wallet balances, without the four-way fan-out."""
        if not self._demo_mode.enabled:
            return

        generation = self._generation
        try:
            data = await self._backend.fetch_wallet_balances()
        except Exception as e:
            logger.error("Failed to refresh wallet balances: %s", e)
            if generation == self._generation:
                self._store.set_error(str(e))
            return

        if generation != self._generation:
            logger.debug("Demo mode changed during wallet refresh, discarding")
            return

        balances = data.get("balances", data) if isinstance(data, Mapping) else {}
        self._store.set_error(None)
        self._store.update_wallet_balances(normalize_wallet_balances(balances))

    async def _run_cycle(self, generation: int) -> None:
        self._state = RefreshState.LOADING
        self._store.set_loading(True)
        self._store.set_error(None)
        logger.info("Refreshing portfolio")

        try:
            portfolio, pools, borrowable, history = await gather_all(
                self._backend.fetch_portfolio(),
                self._backend.fetch_lending_pools(),
                self._backend.fetch_borrowable_holdings(),
                self._backend.fetch_portfolio_history(),
            )
            snapshot = self.build_snapshot(portfolio, pools, borrowable, history)
        except Exception as e:
            if generation != self._generation:
                return
            self._state = RefreshState.FAILED
            self._store.set_error(str(e) or e.__class__.__name__)
            logger.error("Failed to refresh portfolio: %s", e)
        else:
            if generation != self._generation:
                logger.debug("Demo mode changed during refresh, discarding result")
                return
            self._store.replace(snapshot)
            self._state = RefreshState.SUCCESS
            logger.info(
                "Portfolio refreshed — balance: $%.2f  invested: $%.2f  gains: %.2f%%",
                snapshot.summary.total_balance,
                snapshot.summary.total_invested,
                snapshot.summary.net_gains_percent,
            )
        finally:
            if generation == self._generation:
                self._store.set_loading(False)
                # SUCCESS or FAILED stays visible until the next cycle starts
                if self._state is RefreshState.LOADING:
                    self._state = RefreshState.IDLE

    def build_snapshot(
        self,
        portfolio: Any,
        pools: Any,
        borrowable: Any,
        history: Any,
    ) -> Snapshot:
        """Reconcile the four endpoint payloads into one snapshot."""
        if not isinstance(portfolio, Mapping):
            portfolio = {}

        now = self._clock()
        wallets = normalize_wallet_balances(portfolio.get("walletBalances"))
        properties = normalize_holdings(portfolio.get("properties"))
        lending = lending_positions_from_pools(pools)
        borrows = borrow_positions_from_holdings(
            borrowable, self._config.assumed_borrow_ltv
        )

        raw_summary = portfolio.get("summary")
        rent_earned = 0.0
        if isinstance(raw_summary, Mapping):
            rent_earned = to_number(raw_summary.get("totalRentEarned")) or 0.0

        summary = calculate_summary(properties, wallets, lending, borrows, rent_earned)

        activity = portfolio.get("recentActivity")
        if not isinstance(activity, list):
            activity = []
        recent_activity = tuple(
            dict(item) for item in activity if isinstance(item, Mapping)
        )

        return Snapshot(
            summary=summary,
            wallet_balances=wallets,
            properties=properties,
            lending_positions=lending,
            borrow_positions=borrows,
            recent_activity=recent_activity,
            chart_data=resolve_chart_data(history, summary, now),
            last_refresh=now,
        )

    async def run_continuous(self, interval_seconds: int | None = None) -> None:
        """Refresh forever at a fixed interval."""
        interval = interval_seconds or self._config.refresh_interval_seconds
        logger.info("Starting continuous refresh (every %d seconds)", interval)

        while True:
            try:
                await self.refresh_portfolio()
                await asyncio.sleep(interval)
            except Exception as e:
                logger.error("Error in refresh loop: %s", e)
                await asyncio.sleep(interval)
