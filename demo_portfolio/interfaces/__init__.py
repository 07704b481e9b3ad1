"""Protocol interfaces for the demo portfolio engine."""
from .backend import PortfolioBackend
from .listener import ModeListener, SnapshotListener

__all__ = ["ModeListener", "PortfolioBackend", "SnapshotListener"]
