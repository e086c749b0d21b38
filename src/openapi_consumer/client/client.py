"""Operation registry over a resolved API description.

:class:`Client` owns the dereferenced document, the alias tables and the
transport. Operations are materialised the first time they are named and
memoised by id; :meth:`Client.request` hands out a fresh
:class:`~openapi_consumer.client.request.RequestBuilder` per call.

Operation lookup order:

1. the ``operation`` alias table maps the caller's name to a canonical id;
2. a path item entry whose ``operationId`` equals that id;
3. for entries without ``operationId``, the derived id: the path with every
   ``/`` removed, followed by the verb (``/users`` + ``get`` -> ``usersget``).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import TYPE_CHECKING, Any, Optional, Union

import httpx

from openapi_consumer.client.request import RequestBuilder
from openapi_consumer.client.transport import Transport
from openapi_consumer.exceptions import InvalidArgumentError
from openapi_consumer.model.operation import Operation
from openapi_consumer.model.view import SpecificationView
from openapi_consumer.models import ClientConfig, HTTPMethod
from openapi_consumer.parser.loader import load_document, validate_swagger_version
from openapi_consumer.parser.resolver import resolve_references

if TYPE_CHECKING:
    from openapi_consumer.exceptions import TransportError

    ExceptionHandler = Callable[[RequestBuilder, TransportError], None]

logger = logging.getLogger(__name__)

_VERBS = frozenset(method.value for method in HTTPMethod)


def derive_operation_id(path: str, verb: str) -> str:
    """Return the id of an operation that declares no ``operationId``."""
    return path.replace("/", "") + verb


class Client:
    """Callable view of a Swagger 2.x document.

    The document is dereferenced at construction, so a broken reference
    surfaces here rather than on first use.

    Args:
        document: The decoded API description. It is not modified.
        config: Host/base path/scheme overrides, transport settings,
            aliases and the silent-fail reference allow-list.
        transport: A ready transport. Built lazily from ``config.transport``
            when omitted.
        httpx_transport: Low-level httpx transport for the lazily built
            transport (e.g. :class:`httpx.MockTransport` in tests).
        exception_handler: Called as ``handler(request, error)`` for every
            transport failure a request captures.

    Raises:
        ResolutionError: If a ``$ref`` cannot be satisfied.

    Example::

        with Client.from_source("petstore.json") as client:
            request = client.request("getPetById").execute({"petId": 1})
            if request.succeeded():
                print(request.json)
    """

    def __init__(
        self,
        document: Mapping[str, Any],
        config: Optional[ClientConfig] = None,
        transport: Optional[Transport] = None,
        httpx_transport: Optional[httpx.BaseTransport] = None,
        exception_handler: Optional[ExceptionHandler] = None,
    ) -> None:
        self.config = config or ClientConfig()
        self.exception_handler = exception_handler
        self._transport = transport
        self._httpx_transport = httpx_transport
        self._operations: dict[str, Operation] = {}
        self._aliases: dict[str, dict[str, str]] = {
            category: dict(table)
            for category, table in self.config.aliases.model_dump().items()
            if isinstance(table, Mapping)
        }

        self.document = resolve_references(
            dict(document),
            silent_fail_refs=self.config.silent_fail_refs,
            max_passes=self.config.max_resolve_passes,
        )

        self.host: Optional[str] = self.config.host or self.document.get("host")
        self.base_path: Optional[str] = self.config.base_path or self.document.get("basePath")
        self.scheme: Optional[str] = self.config.scheme

        if self.host and "://" in self.host:
            # Some generators put the scheme into the host field.
            prefix, _, self.host = self.host.partition("://")
            self.scheme = self.scheme or prefix

        if not self.scheme:
            schemes = self.document.get("schemes") or ["http"]
            self.scheme = schemes[0]

        self._view = SpecificationView(
            self,
            self.document,
            fields={"host": "host", "basePath": "base_path", "scheme": "scheme"},
        )

    @classmethod
    def from_source(
        cls,
        source: str,
        config: Optional[ClientConfig] = None,
        **kwargs: Any,
    ) -> Client:
        """Load *source* (path, URL or ``-``) and build a client for it.

        Raises:
            SpecParseError: If the source cannot be read or is not Swagger 2.x.
            ResolutionError: If a ``$ref`` cannot be satisfied.
        """
        document = load_document(source)
        version = validate_swagger_version(document)
        logger.debug("Loaded Swagger %s document from %s", version, source)
        return cls(document, config=config, **kwargs)

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        if self._transport is not None:
            self._transport.close()

    # ------------------------------------------------------------------ #
    # Document facets
    # ------------------------------------------------------------------ #

    @property
    def view(self) -> SpecificationView:
        """The document-root view model objects fall back to."""
        return self._view

    def get(self, name: str) -> Any:
        """Read a document-root facet, e.g. ``client.get("info.title")``."""
        return self._view.get(name)

    @property
    def base_url(self) -> str:
        return self.config.transport.base_url or f"{self.scheme}://{self.host or ''}"

    @property
    def transport(self) -> Transport:
        if self._transport is None:
            self._transport = Transport(
                self.base_url, self.config.transport, httpx_transport=self._httpx_transport
            )
        return self._transport

    # ------------------------------------------------------------------ #
    # Aliases
    # ------------------------------------------------------------------ #

    def set_aliases(
        self,
        category: Union[str, Mapping[str, Mapping[str, str]]],
        aliases: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Replace one alias table, or every table at once.

        Example::

            client.set_aliases("operation", {"userCreate": "createUserUsingPOST"})
            client.set_aliases("parameter", {"email": "userData/emailAddress"})
            client.set_aliases({"operation": {}, "parameter": {}})
        """
        if isinstance(category, Mapping):
            self._aliases = {name: dict(table) for name, table in category.items()}
        else:
            self._aliases[category] = dict(aliases or {})

    def alias(
        self,
        category: str,
        name: Optional[str] = None,
        default: Optional[str] = None,
    ) -> Any:
        """Return one alias target, or the whole table when *name* is ``None``."""
        table = self._aliases.get(category, {})
        if name is None:
            return table
        return table.get(name, default)

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    def operation(self, name: str) -> Optional[Operation]:
        """Return the operation *name* (alias or id) designates, or ``None``."""
        operation_id = self.alias("operation", name, name)
        if operation_id in self._operations:
            return self._operations[operation_id]

        for path, verb, node, path_item in self._iter_entries():
            effective_id = node.get("operationId") or derive_operation_id(path, verb)
            if effective_id != operation_id:
                continue
            operation = Operation(
                effective_id,
                verb,
                path,
                node,
                path_parameters=path_item.get("parameters"),
                root=self._view,
            )
            self._operations[effective_id] = operation
            logger.debug("Materialised operation %r", operation)
            return operation

        return None

    def operation_ids(self) -> list[str]:
        """Every effective operation id, in document order."""
        return [
            node.get("operationId") or derive_operation_id(path, verb)
            for path, verb, node, _ in self._iter_entries()
        ]

    def operations(self) -> list[Operation]:
        """Materialise and return every operation, in document order."""
        operations = []
        for operation_id in self.operation_ids():
            operation = self.operation(operation_id)
            if operation is not None:
                operations.append(operation)
        return operations

    def request(self, name: str) -> RequestBuilder:
        """Return a fresh request builder for operation *name*.

        Raises:
            InvalidArgumentError: If no operation matches *name*.
        """
        operation = self.operation(name)
        if operation is None:
            raise InvalidArgumentError(f'Unknown operation "{name}"')
        return RequestBuilder(self, operation, self.transport, self.exception_handler)

    def _iter_entries(self) -> Iterator[tuple[str, str, Mapping[str, Any], Mapping[str, Any]]]:
        paths = self.document.get("paths") or {}
        for path, path_item in paths.items():
            if not isinstance(path_item, Mapping):
                continue
            for verb, node in path_item.items():
                if verb in _VERBS and isinstance(node, Mapping):
                    yield path, verb, node, path_item
