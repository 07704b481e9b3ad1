"""Listener protocols — snapshot and mode-change subscribers."""
from typing import Protocol

from ..models import Snapshot


class SnapshotListener(Protocol):
    """Called with the new snapshot after every store write."""

    def __call__(self, snapshot: Snapshot) -> None: ...


class ModeListener(Protocol):
    """Called synchronously when the demo-mode flag flips."""

    def __call__(self, enabled: bool) -> None: ...
