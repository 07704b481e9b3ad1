"""Demo-mode flag — the external signal governing the portfolio engine."""
from __future__ import annotations

import logging
from typing import Callable, Mapping

from ..config import parse_bool
from ..interfaces.backend import PortfolioBackend
from ..interfaces.listener import ModeListener

logger = logging.getLogger(__name__)


class DemoMode:
    """Observable boolean; listeners run synchronously on every flip."""

    def __init__(self, enabled: bool = False) -> None:
        self._enabled = enabled
        self._listeners: list[ModeListener] = []

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set(self, enabled: bool) -> None:
        if enabled == self._enabled:
            return
        self._enabled = enabled
        logger.info("Demo mode %s", "enabled" if enabled else "disabled")
        for listener in list(self._listeners):
            try:
                listener(enabled)
            except Exception as e:
                logger.error("Demo mode listener failed: %s", e)

    def subscribe(self, listener: ModeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def load_from_backend(self, backend: PortfolioBackend) -> bool:
        """Read ``demoMode`` from the system config endpoint.

        The flag is only turned on by a true boolean (``true``, ``"yes"``,
        ``1`` ...). On failure or a malformed payload the flag is left
        unchanged and the problem is logged.
        """
        try:
            config = await backend.fetch_system_config()
        except Exception as e:
            logger.error("Failed to fetch system config: %s", e)
            return self._enabled

        if not isinstance(config, Mapping):
            logger.warning("Ignoring malformed system config: %r", config)
            return self._enabled

        try:
            enabled = parse_bool(config.get("demoMode"))
        except ValueError:
            logger.warning("Ignoring invalid demoMode value: %r", config.get("demoMode"))
            enabled = False

        self.set(enabled is True)
        return self._enabled
