"""Resolve ``$ref`` pointers into a flat, self-contained document.

Swagger documents use reference markers (``{"$ref": "#/definitions/Pet"}``)
to avoid repetition. :func:`resolve_references` replaces every marker with a
copy of the value it designates so that the rest of the package can read the
document as a plain tree.

The resolution runs in passes. A pass walks the whole document and replaces
each marker it meets with the value found at its pointer in the *current*
document; values pulled in by a pass are not walked until the next one.
Because an inlined definition can contain markers of its own, passes repeat
until one performs no substitution at all.

Only intra-document pointers (``#/...``) are supported. A pointer that
cannot be satisfied raises :class:`~openapi_consumer.exceptions.ResolutionError`
unless it is listed in ``silent_fail_refs``, in which case the marker is
replaced by ``None``.

A genuine reference cycle (``A`` contains a marker to ``B`` which contains
a marker to ``A``) can never reach a fixed point. Cycles are detected up
front and reported as a :class:`~openapi_consumer.exceptions.ResolutionError`
naming the chain; ``max_passes`` is a second guard for anything the up-front
check cannot see.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Iterator
from typing import Any

from openapi_consumer.exceptions import ResolutionError
from openapi_consumer.parser.pointer import MISSING, pointer_segments

logger = logging.getLogger(__name__)

REF_KEY = "$ref"
"""Key identifying a reference marker."""


def resolve_references(
    document: dict[str, Any],
    silent_fail_refs: Iterable[str] = (),
    max_passes: int = 64,
) -> dict[str, Any]:
    """Return a fully dereferenced copy of *document*.

    Args:
        document: The decoded API description. It is not modified.
        silent_fail_refs: Pointers allowed to fail; they resolve to ``None``.
        max_passes: Upper bound on resolution passes.

    Returns:
        A new document in which no node is a reference marker.

    Raises:
        ResolutionError: If a pointer cannot be satisfied and is not
            allow-listed, if the document contains a reference cycle, or if
            resolution does not settle within ``max_passes``.

    Example::

        raw = {
            "definitions": {"Id": {"type": "integer"}},
            "parameters": [{"$ref": "#/definitions/Id"}],
        }
        resolve_references(raw)["parameters"]
        # [{"type": "integer"}]
    """
    allowed = frozenset(silent_fail_refs)
    root = copy.deepcopy(document)

    cycle = find_reference_cycle(root)
    if cycle:
        raise ResolutionError(
            cycle[0],
            f"Circular reference detected: {' -> '.join(cycle)}",
        )

    for pass_number in range(1, max_passes + 1):
        substitutions = _resolve_pass(root, root, allowed)
        logger.debug("Resolution pass %d: %d substitution(s)", pass_number, substitutions)
        if substitutions == 0:
            return root

    remaining = sorted(set(_iter_pointers(root)))
    raise ResolutionError(
        remaining[0] if remaining else "#",
        f"References did not settle after {max_passes} passes "
        f"(still unresolved: {', '.join(remaining) or 'none'})",
    )


def is_reference(node: Any) -> bool:
    """Return ``True`` if *node* is a reference marker."""
    return isinstance(node, dict) and isinstance(node.get(REF_KEY), str)


def lookup_pointer(root: Any, pointer: str) -> Any:
    """Return the value designated by *pointer* in *root*, or ``MISSING``.

    Markers met half-way along the pointer are followed, so
    ``#/definitions/Order/properties/pet/properties/name`` works while
    ``pet`` is still an unresolved marker.

    Raises:
        ResolutionError: If following markers loops back on itself.
    """
    if not pointer.startswith("#"):
        # External files and URLs are not supported.
        return MISSING
    return _follow(root, pointer_segments(pointer), seen=frozenset({pointer}))


def find_reference_cycle(root: Any) -> list[str]:
    """Return a pointer chain forming a cycle, or an empty list.

    Builds the graph "pointer P's target contains a marker to Q" over the
    raw document and searches it depth-first. Pointers whose targets cannot
    be found are ignored here; they are reported during resolution.
    """
    graph: dict[str, list[str]] = {}
    pending = list(dict.fromkeys(_iter_pointers(root)))
    while pending:
        pointer = pending.pop()
        if pointer in graph:
            continue
        try:
            target = lookup_pointer(root, pointer)
        except ResolutionError:
            return [pointer, pointer]
        edges: list[str] = []
        if target is not MISSING:
            edges = list(dict.fromkeys(_iter_pointers(target)))
        graph[pointer] = edges
        pending.extend(edge for edge in edges if edge not in graph)

    visiting: list[str] = []
    done: set[str] = set()

    def visit(pointer: str) -> list[str]:
        if pointer in done:
            return []
        if pointer in visiting:
            return visiting[visiting.index(pointer):] + [pointer]
        visiting.append(pointer)
        for edge in graph.get(pointer, []):
            chain = visit(edge)
            if chain:
                return chain
        visiting.pop()
        done.add(pointer)
        return []

    for pointer in graph:
        chain = visit(pointer)
        if chain:
            return chain
    return []


def _resolve_pass(node: Any, root: dict[str, Any], allowed: frozenset[str]) -> int:
    """Replace every marker below *node* once; return the substitution count."""
    substitutions = 0
    if isinstance(node, dict):
        items: Iterable[tuple[Any, Any]] = list(node.items())
    elif isinstance(node, list):
        items = list(enumerate(node))
    else:
        return 0

    for key, child in items:
        if is_reference(child):
            node[key] = _substitute(child[REF_KEY], root, allowed)
            substitutions += 1
        else:
            substitutions += _resolve_pass(child, root, allowed)
    return substitutions


def _substitute(pointer: str, root: dict[str, Any], allowed: frozenset[str]) -> Any:
    value = lookup_pointer(root, pointer)
    if value is MISSING:
        if pointer in allowed:
            logger.warning("Reference %s could not be resolved; substituting null", pointer)
            return None
        raise ResolutionError(pointer)
    return copy.deepcopy(value)


def _follow(node: Any, segments: list[str], seen: frozenset[str]) -> Any:
    current = node
    root = node
    for segment in segments:
        if is_reference(current):
            pointer = current[REF_KEY]
            if pointer in seen:
                raise ResolutionError(pointer, f"Circular reference detected at {pointer}")
            if not pointer.startswith("#"):
                return MISSING
            current = _follow(root, pointer_segments(pointer), seen | {pointer})
            if current is MISSING:
                return MISSING
        if isinstance(current, dict):
            if segment not in current:
                return MISSING
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError):
                return MISSING
        else:
            return MISSING
    return current


def _iter_pointers(node: Any) -> Iterator[str]:
    """Yield the pointer of every marker found in *node*, depth-first."""
    if is_reference(node):
        yield node[REF_KEY]
        return
    if isinstance(node, dict):
        for child in node.values():
            yield from _iter_pointers(child)
    elif isinstance(node, list):
        for child in node:
            yield from _iter_pointers(child)
