"""Store adapter base class.

Both stores share a small lifecycle contract (connect, disconnect, ping)
so the facade can probe and close them without knowing which driver sits
underneath.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class StoreAdapter(ABC):
    """Abstract base class for the relational and document adapters."""

    #: Label used in logs, error context and health reports.
    store_name: str = "store"

    def __init__(self) -> None:
        self._connected = False

    @property
    def is_connected(self) -> bool:
        """Whether the adapter has opened its driver resources."""
        return self._connected

    @abstractmethod
    def connect(self) -> None:
        """Open driver resources (engine, client)."""
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """Release driver resources."""
        ...

    @abstractmethod
    def ping(self) -> bool:
        """Round-trip to the server; True when it answered."""
        ...

    def __enter__(self) -> StoreAdapter:
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()


__all__ = ["StoreAdapter"]
