"""
Fee Sources - Base Interface.

CONTRACT:
- detect() returns newly observed fee events, possibly empty
- No duplicate references across calls within a session
- Sources never touch the fee accumulator directly
"""

from abc import ABC, abstractmethod
from typing import List

from .types import FeeEvent, FeeEventSource


class FeeSource(ABC):
    """Abstract fee inflow detector."""

    source_type: FeeEventSource

    @abstractmethod
    async def detect(self) -> List[FeeEvent]:
        pass

    async def close(self) -> None:
        """Release network resources, if any."""
        return None


__all__ = ["FeeSource"]
