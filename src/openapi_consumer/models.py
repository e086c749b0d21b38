"""Pydantic configuration models and shared enums for openapi_consumer.

This is the single source of truth for configuration shapes. The models
fall into two groups:

**Configuration models** -- loaded from JSON/YAML by
:mod:`openapi_consumer.config` or built directly in code:
    :class:`TransportConfig`, :class:`AliasConfig`, and :class:`ClientConfig`.

**Document vocabulary** -- enums naming the fixed value sets of a Swagger 2.x
document:
    :class:`HTTPMethod` and :class:`ParameterLocation`.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Document vocabulary ---


class HTTPMethod(str, enum.Enum):
    """HTTP verbs recognised as operation keys inside a path item.

    Any other key of a path item (``parameters``, vendor extensions) is not
    an operation.
    """

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"


class ParameterLocation(str, enum.Enum):
    """Locations where a parameter can appear, per the Swagger 2.x ``in`` field."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    BODY = "body"
    FORM_DATA = "formData"


# --- Configuration ---


class TransportConfig(BaseModel):
    """Settings passed through to the HTTP transport.

    ``base_url`` overrides the ``scheme://host`` pair derived from the
    document and client overrides. When ``raise_for_status`` is enabled an
    HTTP status of 400 or above is reported as a transport failure that
    still carries the response.
    """

    base_url: Optional[str] = Field(
        default=None, description="Override for scheme://host"
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    follow_redirects: bool = True
    headers: dict[str, str] = Field(
        default_factory=dict, description="Headers sent with every request"
    )
    raise_for_status: bool = Field(
        default=True, description="Treat HTTP status >= 400 as a transport failure"
    )


class AliasConfig(BaseModel):
    """Short-name tables for operations and parameters.

    ``operation`` maps a caller-facing name to an ``operationId``.
    ``parameter`` maps a short name to a parameter or property name; the
    target may be scoped to a containing structure with ``/`` or ``.``
    (``{"mail": "user/email"}`` only applies where ``email`` sits inside
    ``user``).

    Example::

        AliasConfig(
            operation={"userCreate": "createUserUsingPOST"},
            parameter={"email": "emailAddress"},
        )
    """

    model_config = ConfigDict(extra="allow")

    operation: dict[str, str] = Field(default_factory=dict)
    parameter: dict[str, str] = Field(default_factory=dict)


class ClientConfig(BaseModel):
    """Everything a :class:`~openapi_consumer.client.Client` can be configured with.

    ``host``, ``base_path`` and ``scheme`` override the values declared in
    the document. ``silent_fail_refs`` lists ``$ref`` pointers that may fail
    to resolve without aborting construction: they resolve to ``None`` and
    the operations that need them fail only when invoked. Document
    generators that emit dangling internal references are the usual reason
    to populate it (Springfox, for instance, references
    ``#/definitions/Principal`` without defining it).

    ``max_resolve_passes`` caps the resolver's fixed-point loop.

    See Also:
        :func:`~openapi_consumer.config.resolve_config`: Builds this model
        from files, environment variables, and CLI flags.
    """

    model_config = ConfigDict(populate_by_name=True)

    host: Optional[str] = None
    base_path: Optional[str] = Field(default=None, alias="basePath")
    scheme: Optional[str] = None
    transport: TransportConfig = Field(default_factory=TransportConfig)
    aliases: AliasConfig = Field(default_factory=AliasConfig)
    silent_fail_refs: list[str] = Field(default_factory=list)
    max_resolve_passes: int = Field(default=64, ge=1)
