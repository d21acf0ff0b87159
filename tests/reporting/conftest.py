"""Shared fakes for aiohttp-backed clients."""

from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock


class FakeResponse:
    """Async context manager standing in for aiohttp's response."""

    def __init__(self, status: int = 200, payload: Any = None, text: str = ""):
        self.status = status
        self._payload = payload
        self._text = text

    async def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info) -> bool:
        return False


def fake_session(response: Optional[FakeResponse] = None, error: Optional[Exception] = None) -> MagicMock:
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()

    if error is not None:
        session.get = MagicMock(side_effect=error)
        session.post = MagicMock(side_effect=error)
    else:
        session.get = MagicMock(return_value=response)
        session.post = MagicMock(return_value=response)

    return session
