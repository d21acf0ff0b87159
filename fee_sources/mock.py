"""
Fee Sources - Mock Source.

Random fee inflows for simulation and tests: each poll has a
30% chance of producing one 0.1 - 5.1 SOL event.
"""

import logging
import random
from typing import List, Optional, Set

from core.clock import ClockProtocol, SystemClock
from swap_engine.mock import generate_mock_signature

from .base import FeeSource
from .types import ConfirmationStatus, FeeEvent, FeeEventSource


logger = logging.getLogger(__name__)


DETECTION_PROBABILITY = 0.3
MIN_FEE_SOL = 0.1
FEE_RANGE_SOL = 5.0


class MockFeeSource(FeeSource):
    """Mock fee source with seedable randomness."""

    source_type = FeeEventSource.MOCK

    def __init__(
        self,
        clock: Optional[ClockProtocol] = None,
        rng: Optional[random.Random] = None,
        detection_probability: float = DETECTION_PROBABILITY,
    ):
        self._clock = clock or SystemClock()
        self._rng = rng or random.Random()
        self._detection_probability = detection_probability
        self._generated: Set[str] = set()

    def _unique_signature(self) -> str:
        signature = generate_mock_signature(self._rng)
        while signature in self._generated:
            signature = generate_mock_signature(self._rng)
        self._generated.add(signature)
        return signature

    async def detect(self) -> List[FeeEvent]:
        if self._rng.random() >= self._detection_probability:
            return []

        event = FeeEvent(
            signature=self._unique_signature(),
            timestamp=self._clock.unix_seconds(),
            amount_sol=self._rng.random() * FEE_RANGE_SOL + MIN_FEE_SOL,
            source=self.source_type,
            confirmation_status=ConfirmationStatus.FINALIZED,
        )

        logger.debug(
            f"Mock fee detected | signature={event.signature[:12]}... "
            f"amount={event.amount_sol:.6f} SOL"
        )
        return [event]


__all__ = ["MockFeeSource"]
