"""Smart-fill: route flat, short-named caller data onto nested parameter paths.

Callers may pass ``{"mail": "x@y.com"}`` where the operation expects
``{"user": {"email": "x@y.com"}}``. :class:`SmartFill` enumerates every
dotted path reachable from the operation's parameters and the short names
that may stand for each path:

* the path's terminal segment (``email`` for ``user.email``);
* every parameter alias whose target equals a trailing run of the path's
  segments (``{"mail": "user/email"}`` and ``{"mail": "email"}`` both
  match ``user.email``).

When one short name is valid for several paths the first path in
enumeration order wins. Enumeration follows parameter declaration order
and, within an object, property declaration order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from openapi_consumer.model.datatypes import DataType, ObjectDataType
from openapi_consumer.model.operation import Operation
from openapi_consumer.parser.pointer import set_delimited

logger = logging.getLogger(__name__)


class SmartFill:
    """Short-name index for one operation.

    Args:
        operation: The operation whose parameter tree is indexed.
        parameter_aliases: Short name to target table. Targets may use
            ``/`` or ``.`` as separator.

    Example::

        fill = SmartFill(operation, {"mail": "user/email"})
        fill.remap({"mail": "x@y.com"})
        # {"user": {"email": "x@y.com"}}
    """

    def __init__(
        self,
        operation: Operation,
        parameter_aliases: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.operation = operation
        self.aliases = {
            alias: target.replace("/", ".")
            for alias, target in (parameter_aliases or {}).items()
        }
        self._index: Optional[dict[str, list[str]]] = None

    @property
    def index(self) -> dict[str, list[str]]:
        """Full dotted path to its accepted short names, built once."""
        if self._index is None:
            self._index = {}
            for parameter in self.operation.parameters.values():
                self._collect(parameter.data_type, "", self._index)
        return self._index

    def target(self, key: str) -> str:
        """Return the full path *key* stands for, or *key* itself if none."""
        if key in self.index:
            return key
        for path, short_names in self.index.items():
            if key in short_names:
                return path
        return key

    def remap(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Rewrite the keys of *data* to full paths, nesting on ``.``."""
        result: dict[str, Any] = {}
        for key, value in data.items():
            path = self.target(key)
            if path != key:
                logger.debug("Smart-fill: %s -> %s", key, path)
            set_delimited(result, path, value)
        return result

    def _collect(self, data_type: DataType, prefix: str, index: dict[str, list[str]]) -> None:
        path = f"{prefix}.{data_type.name}" if prefix else data_type.name
        suffixes = _suffixes(path)

        short_names = [data_type.name]
        short_names.extend(
            alias for alias, target in self.aliases.items() if target in suffixes
        )
        index[path] = short_names

        if isinstance(data_type, ObjectDataType):
            for child in data_type.properties.values():
                self._collect(child, path, index)


def _suffixes(path: str) -> set[str]:
    """``"a.b.c"`` -> ``{"c", "b.c", "a.b.c"}``."""
    segments = path.split(".")
    return {".".join(segments[start:]) for start in range(len(segments))}
