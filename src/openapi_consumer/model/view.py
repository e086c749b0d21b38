"""Uniform read access to a model object's slice of the resolved document.

Operations, parameters, data types and the client all answer questions such
as "what does this node declare for ``consumes``?" the same way.
:class:`SpecificationView` implements that lookup once and each model object
owns one.

Resolution order for a property name ``X``:

1. an accessor registered for ``X`` (e.g. an operation's ``parameters``);
2. a stored field registered for ``X`` (e.g. an operation's ``verb``);
3. the document subtree at ``X``, where ``#/``, ``/`` and ``.`` are all
   accepted as separators;
4. for ``consumes``, ``produces`` and ``schemes`` only, the same property
   read from the document root;
5. the defaults ``required = False`` and ``deprecated = False``;
6. ``None``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Optional

from openapi_consumer.parser.pointer import MISSING, dig, name_segments

ROOT_INHERITED = frozenset({"consumes", "produces", "schemes"})
"""Facets a Swagger operation inherits from the document root when absent."""

DEFAULTS: dict[str, Any] = {"required": False, "deprecated": False}


class SpecificationView:
    """Ordered property lookup over an owner object and its document subtree.

    Args:
        owner: The model object the view reads stored fields from.
        subtree: The owner's slice of the resolved document. ``None`` is
            accepted (an allow-listed reference that failed to resolve).
        accessors: Facet name to zero-argument callable.
        fields: Facet name to the owner attribute holding it.
        root: The view for the document root, used for inherited facets.

    Example::

        view = SpecificationView(
            operation,
            {"consumes": ["application/json"]},
            fields={"verb": "verb"},
            root=client_view,
        )
        view.get("consumes")   # ["application/json"]
        view.get("produces")   # read from the document root
        view.get("required")   # False
    """

    def __init__(
        self,
        owner: Any,
        subtree: Optional[Mapping[str, Any]],
        accessors: Optional[Mapping[str, Callable[[], Any]]] = None,
        fields: Optional[Mapping[str, str]] = None,
        root: Optional[SpecificationView] = None,
    ) -> None:
        self._owner = owner
        self._subtree = subtree if subtree is not None else {}
        self._accessors = dict(accessors or {})
        self._fields = dict(fields or {})
        self._root = root

    def get(self, name: str) -> Any:
        """Return the value of facet *name* following the lookup chain."""
        if name in self._accessors:
            return self._accessors[name]()

        if name in self._fields:
            return getattr(self._owner, self._fields[name])

        value = self._lookup(name)
        if value is not MISSING:
            return value

        key = ".".join(name_segments(name))
        if key in ROOT_INHERITED and self._root is not None:
            return self._root.get(key)

        return DEFAULTS.get(key)

    def _lookup(self, name: str) -> Any:
        if name in self._subtree:
            return self._subtree[name]
        return dig(self._subtree, name_segments(name), MISSING)
