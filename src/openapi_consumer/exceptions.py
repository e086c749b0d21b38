"""Exception hierarchy for openapi_consumer.

All exceptions inherit from :class:`ConsumerError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`openapi_consumer.exit_codes`. The CLI entry point in
:func:`openapi_consumer.app.main` catches ``ConsumerError`` and exits with
the appropriate code.

The classes follow a simple severity policy:

* structural problems with the document (:class:`ResolutionError`,
  :class:`ConfigurationError`, :class:`SpecParseError`) and misuse
  (:class:`InvalidArgumentError`) propagate immediately;
* :class:`ValidationError` aborts a single call before anything is sent;
* :class:`TransportError` is captured on the
  :class:`~openapi_consumer.client.request.RequestBuilder` and never
  escapes ``execute()``.

Subclass hierarchy::

    ConsumerError            (exit 1)
    +-- ConfigurationError   (exit 1)
    +-- InvalidArgumentError (exit 2)
    +-- ValidationError      (exit 3)
    +-- TransportError       (exit 4)
    +-- SpecParseError       (exit 7)
    +-- ResolutionError      (exit 8)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from openapi_consumer.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_REQUEST_FAILED,
    EXIT_RESOLUTION_ERROR,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_VALIDATION_FAILURE,
)

if TYPE_CHECKING:
    import httpx


class ConsumerError(Exception):
    """Base exception for all openapi_consumer errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(ConsumerError):
    """Raised for a broken schema (missing ``type``) or an unusable config file."""

    exit_code = EXIT_GENERIC_FAILURE


class InvalidArgumentError(ConsumerError):
    """Raised when an unknown operation, property, or type discriminator is requested."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(ConsumerError):
    """Raised when the API description cannot be loaded or parsed."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ResolutionError(ConsumerError):
    """Raised when a ``$ref`` pointer cannot be satisfied.

    Args:
        pointer: The offending pointer string (e.g. ``"#/definitions/Pet"``).
        message: Optional detail; a default message naming the pointer is
            used when omitted.
    """

    exit_code = EXIT_RESOLUTION_ERROR

    def __init__(self, pointer: str, message: Optional[str] = None):
        super().__init__(message or f"Unable to resolve reference {pointer}")
        self.pointer = pointer


class ValidationError(ConsumerError):
    """Raised when supplied data violates a parameter or schema rule.

    Carries field-keyed messages in the same shape a form validator would
    produce, e.g. ``{"email": ["The email field is required."]}``.

    Args:
        messages: Mapping of field name to the list of violated-rule messages.
    """

    exit_code = EXIT_VALIDATION_FAILURE

    def __init__(self, messages: dict[str, list[str]]):
        self.messages = messages
        summary = "; ".join(
            message for field_messages in messages.values() for message in field_messages
        )
        super().__init__(summary or "Validation failed")

    @property
    def fields(self) -> list[str]:
        """Names of the fields that failed validation."""
        return list(self.messages)


class TransportError(ConsumerError):
    """Raised by the transport on network or HTTP-level failure.

    Args:
        message: Description of the failure.
        response: The HTTP response when the server answered (e.g. a 4xx/5xx
            status), ``None`` for connection-level failures.
    """

    exit_code = EXIT_REQUEST_FAILED

    def __init__(self, message: str, response: Optional[httpx.Response] = None):
        super().__init__(message)
        self.response = response

    def has_response(self) -> bool:
        """Return ``True`` when the failure carries a server response."""
        return self.response is not None
