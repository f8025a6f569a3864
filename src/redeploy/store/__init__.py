"""Storage ports and the default in-memory adapters."""

from redeploy.store.memory import Stores, get_stores, reset_stores

__all__ = ["Stores", "get_stores", "reset_stores"]
