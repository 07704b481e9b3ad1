"""REST client for the demo backend."""
from .client import BackendError, DemoApiClient

__all__ = ["BackendError", "DemoApiClient"]
