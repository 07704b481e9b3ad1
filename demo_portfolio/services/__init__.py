"""Service modules"""
from .demo_mode import DemoMode
from .orchestrator import PortfolioOrchestrator, gather_all
from .store import SnapshotStore

__all__ = ["DemoMode", "PortfolioOrchestrator", "SnapshotStore", "gather_all"]
