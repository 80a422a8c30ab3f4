import time
from abc import ABC, abstractmethod


class Clock(ABC):
    @abstractmethod
    def now(self) -> int:
        """Current time in epoch milliseconds."""
        pass


class SystemClock(Clock):
    def now(self) -> int:
        return int(time.time() * 1000)
