"""Nested get/set helpers for decoded API documents.

Keys inside an API document routinely contain characters that other tools
treat as separators: path templates contain ``/`` and media types or vendor
extensions may contain ``.``. The helpers in this module therefore always
try a key *literally* before splitting it into segments, and take the
delimiter as an argument instead of assuming one.

:func:`pointer_segments` turns an intra-document pointer (``#/a/b``) into
segments, honouring RFC 6901 escaping (``~1`` for ``/``, ``~0`` for ``~``).
:func:`name_segments` turns a property name used by
:class:`~openapi_consumer.model.view.SpecificationView` into segments, where
``#/``, ``/`` and ``.`` are all accepted.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, MutableMapping, Sequence
from typing import Any

MISSING: Any = object()
"""Sentinel distinguishing "absent" from a stored ``None``."""

_NAME_SEPARATORS = re.compile(r"[/.]")


def pointer_segments(pointer: str) -> list[str]:
    """Split an intra-document pointer into unescaped segments.

    Args:
        pointer: A pointer beginning with ``#`` (e.g. ``"#/definitions/Pet"``).

    Returns:
        The path segments; ``"#"`` and ``"#/"`` yield an empty list (the
        document root).
    """
    body = pointer[1:] if pointer.startswith("#") else pointer
    body = body.lstrip("/")
    if not body:
        return []
    return [segment.replace("~1", "/").replace("~0", "~") for segment in body.split("/")]


def name_segments(name: str) -> list[str]:
    """Split a property name into segments, accepting reference syntax.

    ``"#/schema/properties"``, ``"schema/properties"`` and
    ``"schema.properties"`` all produce ``["schema", "properties"]``.
    """
    if name.startswith("#/"):
        name = name[2:]
    return [segment for segment in _NAME_SEPARATORS.split(name) if segment != ""]


def dig(data: Any, segments: Sequence[str], default: Any = None) -> Any:
    """Walk *data* along *segments*, returning *default* when a step is missing.

    Mappings are indexed by key, lists by integer index. Any other node
    ends the walk.
    """
    current = data
    for segment in segments:
        if isinstance(current, Mapping):
            if segment not in current:
                return default
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError):
                return default
        else:
            return default
    return current


def get_delimited(
    data: Any, key: str, delimiter: str = ".", default: Any = None
) -> Any:
    """Fetch a value by delimited *key*, trying the literal key first.

    Example::

        get_delimited({"a.b": 1}, "a.b")           # 1 (literal key)
        get_delimited({"a": {"b": 2}}, "a.b")      # 2 (segmented)
        get_delimited({"/x": {"get": 3}}, "/x|get", "|")  # 3
    """
    if isinstance(data, Mapping) and key in data:
        return data[key]
    return dig(data, key.split(delimiter), default)


def set_segments(data: MutableMapping[str, Any], segments: Sequence[str], value: Any) -> None:
    """Assign *value* at *segments*, creating intermediate dicts as needed.

    An intermediate that exists but is not a mapping is replaced by an
    empty dict.
    """
    if not segments:
        raise ValueError("Cannot assign to an empty path")
    current: MutableMapping[str, Any] = data
    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, MutableMapping):
            child = {}
            current[segment] = child
        current = child
    current[segments[-1]] = value


def set_delimited(
    data: MutableMapping[str, Any], key: str, value: Any, delimiter: str = "."
) -> None:
    """Assign *value* at delimited *key* (see :func:`set_segments`)."""
    set_segments(data, key.split(delimiter), value)
