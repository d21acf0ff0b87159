"""
Fee Sources - HTTP API Source.

Polls an external endpoint that returns fee events as JSON,
either a bare list or an object with an "events" list:

    [{"signature": "...", "timestamp": 1700000000, "amountSol": 1.5,
      "confirmationStatus": "finalized"}]
"""

import asyncio
import logging
from typing import Any, List, Optional, Set

import aiohttp

from core.exceptions import FeeSourceError

from .base import FeeSource
from .types import FeeEvent, FeeEventSource


logger = logging.getLogger(__name__)


DEFAULT_FEE_API_URL = "https://api.example.com"


class ApiFeeSource(FeeSource):
    """Fee source backed by an HTTP JSON endpoint."""

    source_type = FeeEventSource.API

    def __init__(self, api_url: str = DEFAULT_FEE_API_URL, timeout_seconds: float = 10.0):
        self.api_url = api_url
        self.timeout_seconds = timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None
        self._seen: Set[str] = set()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            )
        return self._session

    async def _fetch(self) -> Any:
        session = await self._get_session()

        try:
            async with session.get(self.api_url) as response:
                if response.status != 200:
                    raise FeeSourceError(
                        f"Fee API returned {response.status}",
                        source=self.source_type.value,
                    )
                return await response.json()
        except aiohttp.ClientError as e:
            raise FeeSourceError(
                f"Fee API network error: {e}",
                source=self.source_type.value,
                cause=e,
            )
        except asyncio.TimeoutError as e:
            raise FeeSourceError(
                f"Fee API timed out after {self.timeout_seconds}s",
                source=self.source_type.value,
                cause=e,
            )
        except ValueError as e:
            raise FeeSourceError(
                f"Fee API returned invalid JSON: {e}",
                source=self.source_type.value,
                cause=e,
            )

    def _parse(self, payload: Any) -> List[FeeEvent]:
        raw = payload.get("events", []) if isinstance(payload, dict) else payload
        if not isinstance(raw, list):
            raise FeeSourceError(
                "Fee API payload is not a list of events",
                source=self.source_type.value,
            )

        events = []
        for item in raw:
            try:
                event = FeeEvent.from_dict({**item, "source": self.source_type.value})
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Malformed fee event skipped: {e}")
                continue

            if event.signature in self._seen:
                continue
            self._seen.add(event.signature)
            events.append(event)

        return events

    async def detect(self) -> List[FeeEvent]:
        try:
            events = self._parse(await self._fetch())
        except FeeSourceError as e:
            logger.error(f"Error detecting fees from API: {e}")
            return []

        if events:
            logger.info(f"Fees detected from API | events={len(events)}")
        return events

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None


__all__ = ["DEFAULT_FEE_API_URL", "ApiFeeSource"]
