"""Portfolio backend protocol — demo REST API abstraction."""
from typing import Any, Protocol


class PortfolioBackend(Protocol):
    """Abstract interface for the demo portfolio endpoints.

    Every method returns the ``data`` member of a successful envelope and
    raises on transport failure or a ``success: false`` envelope.
    """

    async def fetch_portfolio(self) -> dict[str, Any]: ...

    async def fetch_lending_pools(self) -> Any: ...

    async def fetch_borrowable_holdings(self) -> Any: ...

    async def fetch_portfolio_history(self) -> Any: ...

    async def fetch_wallet_balances(self) -> dict[str, Any]: ...

    async def fetch_system_config(self) -> dict[str, Any]: ...
