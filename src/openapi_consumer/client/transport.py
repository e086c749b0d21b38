"""HTTP transport collaborator backed by :class:`httpx.Client`.

The :class:`~openapi_consumer.client.request.RequestBuilder` never talks
to httpx directly. It hands the verb, the final URI and a dict of channel
options to :meth:`Transport.invoke`, which maps them onto an httpx request:

=============== ====================================
option          httpx keyword
=============== ====================================
``headers``     ``headers`` (merged over defaults)
``query``       ``params``
``json``        ``json``
``body``        ``content`` (non-text payloads are JSON-encoded)
``form_params`` ``data``
=============== ====================================

Failures are reported as :class:`~openapi_consumer.exceptions.TransportError`.
When the server answered, the error carries the response.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from openapi_consumer.exceptions import TransportError
from openapi_consumer.models import TransportConfig

logger = logging.getLogger(__name__)


def format_scalar(value: Any) -> str:
    """Render a path or header value the way httpx renders query values.

    Booleans become ``"true"``/``"false"``; everything else goes through
    :func:`str`.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Transport:
    """Blocking transport over a lazily created :class:`httpx.Client`.

    Args:
        base_url: ``scheme://host`` prefix joined with every request URI.
        config: Timeout, SSL, redirect and default-header settings.
        httpx_transport: Optional low-level httpx transport. Tests pass an
            :class:`httpx.MockTransport` here.

    Example::

        with Transport("https://api.example.com", TransportConfig()) as t:
            response = t.invoke("get", "/v1/users", {"query": {"page": 2}})
    """

    def __init__(
        self,
        base_url: str,
        config: Optional[TransportConfig] = None,
        httpx_transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url
        self.config = config or TransportConfig()
        self._httpx_transport = httpx_transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> Transport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def invoke(self, verb: str, uri: str, options: Optional[dict[str, Any]] = None) -> httpx.Response:
        """Send one request.

        Args:
            verb: HTTP verb, any case.
            uri: Path (joined with :attr:`base_url`) or absolute URL.
            options: Channel options assembled by the request builder.

        Returns:
            The server's response.

        Raises:
            TransportError: On network errors, or on a status of 400 or
                above when ``raise_for_status`` is enabled. The latter
                carries the response.
        """
        kwargs = self._request_kwargs(options or {})
        method = verb.upper()
        logger.debug("%s %s%s", method, self.base_url, uri)

        try:
            response = self._get_client().request(method, uri, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {uri} failed: {exc}") from exc

        if self.config.raise_for_status and response.status_code >= 400:
            reason = response.reason_phrase or ""
            raise TransportError(
                f"HTTP {response.status_code} {reason}".rstrip(), response=response
            )
        return response

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
                follow_redirects=self.config.follow_redirects,
                headers=self.config.headers,
                transport=self._httpx_transport,
            )
        return self._client

    @staticmethod
    def _request_kwargs(options: dict[str, Any]) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if options.get("headers"):
            kwargs["headers"] = {key: format_scalar(value) for key, value in options["headers"].items()}
        if options.get("query"):
            kwargs["params"] = options["query"]
        if options.get("form_params"):
            kwargs["data"] = options["form_params"]
        if "json" in options:
            kwargs["json"] = options["json"]
        elif "body" in options:
            body = options["body"]
            if isinstance(body, (str, bytes)):
                kwargs["content"] = body
            else:
                kwargs["content"] = json.dumps(body)
        return kwargs
