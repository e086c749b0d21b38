"""Single-use request builder: collect data, validate, route and send.

A :class:`RequestBuilder` is created by
:meth:`~openapi_consumer.client.Client.request` for one call attempt.
Data is accumulated with :meth:`RequestBuilder.with_` (optionally through
smart-fill), then :meth:`RequestBuilder.execute` validates every parameter,
routes values into transport channels and invokes the transport.

Transport failures never escape :meth:`~RequestBuilder.execute`. They are
captured on the builder and inspected through
:meth:`~RequestBuilder.succeeded`, :attr:`~RequestBuilder.exception` and
:attr:`~RequestBuilder.response`.

Channels, keyed by parameter location:

* ``path`` -- substituted into the URI template (``{name}``);
* ``query`` -> ``query``, ``header`` -> ``headers``,
  ``formData`` -> ``form_params``;
* ``body`` -> ``body``, unwrapped to the bare payload and moved to
  ``json`` when the operation consumes JSON.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping
from typing import TYPE_CHECKING, Any, Optional, Union

import httpx

from openapi_consumer.client.smartfill import SmartFill
from openapi_consumer.client.transport import format_scalar
from openapi_consumer.exceptions import ConfigurationError, TransportError
from openapi_consumer.model.operation import Operation
from openapi_consumer.models import ParameterLocation
from openapi_consumer.parser.pointer import get_delimited

if TYPE_CHECKING:
    from openapi_consumer.client.client import Client, ExceptionHandler
    from openapi_consumer.client.transport import Transport

logger = logging.getLogger(__name__)

CHANNELS: dict[str, str] = {
    ParameterLocation.HEADER.value: "headers",
    ParameterLocation.QUERY.value: "query",
    ParameterLocation.BODY.value: "body",
    ParameterLocation.FORM_DATA.value: "form_params",
}
"""Parameter location to options channel. ``path`` is substituted instead."""


def is_json_media_type(media_type: Optional[str]) -> bool:
    """Return ``True`` for ``application/json`` and ``+json`` suffixed types."""
    if not media_type:
        return False
    essence = media_type.split(";", 1)[0].strip().lower()
    return essence == "application/json" or essence.endswith("+json")


class RequestBuilder:
    """Collects caller data for one operation call and records its outcome.

    Not reusable across concurrent calls; build one per attempt.

    Args:
        client: The owning client (base path, parameter aliases).
        operation: The operation to call.
        transport: Sends the assembled request.
        exception_handler: Called as ``handler(self, error)`` when a
            transport failure is captured.

    Example::

        request = client.request("createUser")
        request.with_({"mail": "x@y.com"}, smart_fill=True)
        request.execute()
        if not request.succeeded(accepted_status=[200, 201]):
            print(request.status_code, request.body)
    """

    def __init__(
        self,
        client: Client,
        operation: Operation,
        transport: Transport,
        exception_handler: Optional[ExceptionHandler] = None,
    ) -> None:
        self.client = client
        self._operation = operation
        self._transport = transport
        self._exception_handler = exception_handler
        self._data: dict[str, Any] = {}
        self._options: dict[str, Any] = {}
        self._uri: Optional[str] = None
        self._response: Optional[httpx.Response] = None
        self._exception: Optional[TransportError] = None
        self._smart_fill: Optional[SmartFill] = None

    def __repr__(self) -> str:
        return f"RequestBuilder({self._operation.id!r})"

    # ------------------------------------------------------------------ #
    # Building
    # ------------------------------------------------------------------ #

    def with_(self, data: Mapping[str, Any], smart_fill: bool = False) -> RequestBuilder:
        """Merge *data* into the working data bag.

        Repeated calls accumulate; a later top-level key replaces an
        earlier one.

        Args:
            data: Values keyed by parameter name (or short name when
                *smart_fill* is set).
            smart_fill: Rewrite short and aliased keys onto full parameter
                paths first.

        Returns:
            ``self``, for chaining.
        """
        if smart_fill:
            data = self.smart_fill.remap(data)
        self._data.update(data)
        return self

    @property
    def smart_fill(self) -> SmartFill:
        """The smart-fill index for this operation, built on first use."""
        if self._smart_fill is None:
            self._smart_fill = SmartFill(self._operation, self.client.alias("parameter"))
        return self._smart_fill

    def execute(self, data: Optional[Mapping[str, Any]] = None) -> RequestBuilder:
        """Validate, route and send the request.

        Args:
            data: Optional extra data merged with :meth:`with_` first.

        Returns:
            ``self``. Inspect the outcome with :meth:`succeeded`.

        Raises:
            ValidationError: If a parameter value is missing or invalid.
                Nothing is sent.
            ConfigurationError: If a parameter schema has no ``type`` or
                more than one body parameter is populated.
            InvalidArgumentError: If a body value carries an undeclared
                property.
        """
        if data:
            self.with_(data)

        self._response = None
        self._exception = None
        path, self._options = self._create_request_options(self._data)
        base_path = (self.client.base_path or "").rstrip("/")
        self._uri = f"{base_path}/{path.lstrip('/')}"

        logger.debug("Executing %s %s", self._operation.verb.upper(), self._uri)
        try:
            self._response = self._transport.invoke(self._operation.verb, self._uri, self._options)
        except TransportError as exc:
            logger.warning("Request %s failed: %s", self._operation.id, exc)
            self._exception = exc
            self._response = exc.response
            if self._exception_handler is not None:
                self._exception_handler(self, exc)

        return self

    def _create_request_options(self, data: Mapping[str, Any]) -> tuple[str, dict[str, Any]]:
        path = self._operation.path
        options: dict[str, dict[str, Any]] = {channel: {} for channel in CHANNELS.values()}

        for name, parameter in self._operation.parameters.items():
            value = get_delimited(data, name)
            parameter.validate(value)
            if value is None:
                continue

            if parameter.location == ParameterLocation.PATH.value:
                path = path.replace("{" + name + "}", format_scalar(value))
                continue

            channel = CHANNELS.get(parameter.location)
            if channel is None:
                raise ConfigurationError(
                    f'Parameter "{name}" has unsupported location "{parameter.location}"'
                )
            options[channel][name] = value

        result: dict[str, Any] = {channel: values for channel, values in options.items() if values}

        if "body" in result:
            if len(result["body"]) > 1:
                raise ConfigurationError(
                    f"Operation {self._operation.id} populates more than one body parameter: "
                    + ", ".join(result["body"])
                )
            # The body parameter's name is not part of the payload.
            payload = next(iter(result.pop("body").values()))
            consumes = self._operation.consumes
            if consumes and is_json_media_type(consumes[0]):
                result["json"] = payload
            else:
                result["body"] = payload

        return path, result

    # ------------------------------------------------------------------ #
    # Outcome
    # ------------------------------------------------------------------ #

    def succeeded(self, accepted_status: Union[int, Collection[int]] = 200) -> bool:
        """Return ``True`` if no failure was captured and the status is accepted.

        Args:
            accepted_status: One status code or a collection of them.
        """
        accepted = {accepted_status} if isinstance(accepted_status, int) else set(accepted_status)
        return (
            self._exception is None
            and self._response is not None
            and self._response.status_code in accepted
        )

    @property
    def operation(self) -> Operation:
        return self._operation

    @property
    def request_data(self) -> dict[str, Any]:
        """The working data bag."""
        return self._data

    @property
    def options(self) -> dict[str, Any]:
        """Channel options assembled by the last :meth:`execute`."""
        return self._options

    @property
    def uri(self) -> Optional[str]:
        """Final request URI of the last :meth:`execute`."""
        return self._uri

    @property
    def response(self) -> Optional[httpx.Response]:
        return self._response

    @property
    def exception(self) -> Optional[TransportError]:
        return self._exception

    @property
    def status_code(self) -> Optional[int]:
        return self._response.status_code if self._response is not None else None

    @property
    def body(self) -> Optional[str]:
        """Response text, else the captured failure's message."""
        if self._response is not None:
            return self._response.text
        if self._exception is not None:
            return str(self._exception)
        return None

    @property
    def json(self) -> Any:
        """Parsed response body for JSON responses, else ``None``."""
        if self._response is None:
            return None
        if not is_json_media_type(self._response.headers.get("content-type")):
            return None
        if not self._response.content:
            return None
        try:
            return self._response.json()
        except ValueError:
            # Labelled JSON but not parseable, e.g. a proxy's HTML error page.
            return None
