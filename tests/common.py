"""Test helpers: a fake aiohttp session that replays canned responses."""

from __future__ import annotations

from collections.abc import Callable
import json
from typing import Any
from unittest.mock import MagicMock

import aiohttp


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse used as a context manager."""

    def __init__(self, status: int = 200, body: Any = "") -> None:
        self.status = status
        self._body = body if isinstance(body, str) else json.dumps(body)

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *args: object) -> bool:
        return False

    async def text(self) -> str:
        return self._body

    async def json(self, content_type: str | None = None) -> Any:
        return json.loads(self._body)

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise aiohttp.ClientResponseError(
                MagicMock(), (), status=self.status, message="error"
            )


class FakeSession:
    """Records requests and answers them from a list or a responder."""

    def __init__(
        self,
        responses: list[FakeResponse | Exception] | None = None,
        responder: Callable[[str, str, dict], FakeResponse] | None = None,
    ) -> None:
        self.responses = list(responses or [])
        self.responder = responder
        self.calls: list[tuple[str, str, dict]] = []

    def request(self, method: str, url: Any, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, str(url), kwargs))
        if self.responder is not None:
            return self.responder(method, str(url), kwargs)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        pass
