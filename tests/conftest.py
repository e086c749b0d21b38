"""Shared test fixtures for openapi_consumer.

Provides the petstore fixture document, a recording HTTP handler for
:class:`httpx.MockTransport`, a ready :class:`~openapi_consumer.Client`,
and output-state isolation. These fixtures are discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import httpx
import pytest

from openapi_consumer.client import Client
from openapi_consumer.output import reset_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When CliRunner swaps those streams the cached
    references go stale, so a fresh manager is created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_path() -> Path:
    return FIXTURES_DIR / "petstore_2.0.json"


@pytest.fixture
def petstore_raw(petstore_path: Path) -> dict[str, Any]:
    """Load the raw (unresolved) petstore 2.0 document."""
    with open(petstore_path) as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


class RecordingHandler:
    """MockTransport handler that records requests and replays queued responses.

    With nothing queued it answers ``200`` with an empty JSON object.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._queue: list[httpx.Response] = []
        self.error: Optional[str] = None

    def respond(
        self,
        status_code: int = 200,
        json: Any = None,
        text: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        if text is not None:
            response = httpx.Response(status_code, text=text, headers=headers)
        else:
            response = httpx.Response(status_code, json=json if json is not None else {}, headers=headers)
        self._queue.append(response)

    def fail_with(self, message: str) -> None:
        """Make every following request fail with a connection error."""
        self.error = message

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise httpx.ConnectError(self.error, request=request)
        if self._queue:
            return self._queue.pop(0)
        return httpx.Response(200, json={})


@pytest.fixture
def api() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def petstore_client(petstore_raw: dict[str, Any], api: RecordingHandler) -> Client:
    """A client over the petstore document whose HTTP goes to ``api``."""
    client = Client(petstore_raw, httpx_transport=httpx.MockTransport(api))
    yield client
    client.close()
