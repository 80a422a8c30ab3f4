from abc import ABC, abstractmethod
from typing import List, Dict, Any
from core.models import AircraftSnapshot, NotificationMessage


class FeedUnavailableError(RuntimeError):
    """The aircraft feed could not be fetched or returned an unusable payload."""


class FeedSource(ABC):
    @abstractmethod
    async def fetch_aircraft(self) -> List[AircraftSnapshot]:
        """Fetch the aircraft currently inside the watched radius."""
        pass


class LedgerStore(ABC):
    @abstractmethod
    async def read(self) -> Any:
        """Return the raw persisted ledger data (possibly malformed)."""
        pass

    @abstractmethod
    async def write(self, records: List[Dict[str, Any]]) -> bool:
        """Persist normalized ledger records. Returns False on failure."""
        pass


class Notifier(ABC):
    @abstractmethod
    async def send(self, message: NotificationMessage, config: Dict[str, Any]) -> bool:
        """Deliver a notification through the underlying channel."""
        pass
