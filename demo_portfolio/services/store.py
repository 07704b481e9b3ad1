"""Snapshot store — single writer, many readers."""
from __future__ import annotations

import dataclasses
import logging
from typing import Callable

from ..interfaces.listener import SnapshotListener
from ..models import Snapshot, WalletBalances

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Holds the last computed snapshot plus loading/error flags.

    Only the orchestrator writes; views read ``snapshot`` or subscribe.
    Every write swaps the whole snapshot object, so a reader holding a
    reference never observes a half-applied update.
    """

    def __init__(self) -> None:
        self._snapshot = Snapshot.empty()
        self._loading = False
        self._error: str | None = None
        self._listeners: list[SnapshotListener] = []

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> str | None:
        return self._error

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def replace(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot
        self._notify()

    def update_wallet_balances(self, wallets: WalletBalances) -> None:
        self._snapshot = dataclasses.replace(self._snapshot, wallet_balances=wallets)
        self._notify()

    def reset(self) -> None:
        """Drop everything back to the empty snapshot."""
        self._snapshot = Snapshot.empty()
        self._loading = False
        self._error = None
        self._notify()

    def set_loading(self, loading: bool) -> None:
        self._loading = loading

    def set_error(self, error: str | None) -> None:
        self._error = error

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._snapshot)
            except Exception as e:
                logger.error("Snapshot listener failed: %s", e)
