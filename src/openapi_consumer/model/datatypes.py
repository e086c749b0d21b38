"""Polymorphic validators built from schema nodes of the resolved document.

Each node carrying a ``type`` discriminator becomes one :class:`DataType`
variant. :func:`create` picks the variant from a registry keyed by the
discriminator:

========== ==========================
``type``   variant
========== ==========================
string     :class:`StringDataType`
integer    :class:`IntegerDataType`
number     :class:`NumberDataType`
boolean    :class:`BooleanDataType`
array      :class:`ArrayDataType`
object     :class:`ObjectDataType`
========== ==========================

Scalar variants validate against a list of :class:`Rule` objects built from
the declared facets. Only ``required`` and ``enum`` are enforced besides the
variant's own type rule; ``minimum``/``maximum``, ``minLength``/``maxLength``,
``pattern``, ``minItems``/``maxItems``, ``uniqueItems`` and ``multipleOf``
are accepted in documents but not checked. Subclasses extend :meth:`DataType.rules`
to add them.

:class:`ObjectDataType` validates the ``required`` property list first and
then recurses into each property actually present in the value.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, Optional

from openapi_consumer.exceptions import (
    ConfigurationError,
    InvalidArgumentError,
    ValidationError,
)
from openapi_consumer.model.view import SpecificationView

_INTEGER_TEXT = re.compile(r"^[+-]?\d+$")
_PROPERTY_PATH = re.compile(r"[./]")
_BOOLEAN_VALUES = ("true", "false", "0", "1")


@dataclass(frozen=True)
class Rule:
    """A single validation rule.

    ``check`` returns ``True`` when the value passes. Rules that are not
    ``implicit`` are skipped for absent (``None``) values, so an optional
    field is only type-checked when supplied.
    """

    name: str
    check: Callable[[Any], bool]
    message: str
    implicit: bool = False

    def apply(self, field: str, value: Any) -> Optional[str]:
        """Return the rendered message if *value* violates this rule."""
        if value is None and not self.implicit:
            return None
        if self.check(value):
            return None
        return self.message.format(field=field)


def is_empty(value: Any) -> bool:
    """Return ``True`` for values a ``required`` rule rejects."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


REQUIRED_RULE = Rule(
    "required", lambda value: not is_empty(value), "The {field} field is required.", implicit=True
)


def enum_rule(allowed: list[Any]) -> Rule:
    """Build a rule accepting members of *allowed* (compared as text too)."""
    as_text = {str(item) for item in allowed}

    def check(value: Any) -> bool:
        try:
            if value in allowed:
                return True
        except TypeError:
            pass
        return str(value) in as_text

    return Rule("enum", check, "The selected {field} is invalid.")


class DataType:
    """Base validator for one schema node.

    Args:
        name: The parameter or property name this type validates.
        specification: The schema node (a mapping with a ``type`` key).
        root: The document-root view, for facets inherited from the root.
    """

    type_name: ClassVar[str] = ""

    def __init__(
        self,
        name: str,
        specification: Optional[Mapping[str, Any]],
        root: Optional[SpecificationView] = None,
    ) -> None:
        self.name = name
        self.specification: Mapping[str, Any] = specification or {}
        self._root = root
        self._view = SpecificationView(
            self,
            self.specification,
            accessors=self._accessors(),
            fields={"name": "name"},
            root=root,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    def _accessors(self) -> dict[str, Callable[[], Any]]:
        return {}

    def get(self, name: str) -> Any:
        """Read facet *name* (see :class:`~openapi_consumer.model.view.SpecificationView`)."""
        return self._view.get(name)

    @property
    def type(self) -> str:
        return self.type_name

    @property
    def required(self) -> bool:
        # Object schemas use "required" for a list of property names.
        return self.get("required") is True

    @property
    def enum(self) -> Optional[list[Any]]:
        values = self.get("enum")
        return list(values) if values else None

    def rules(self) -> list[Rule]:
        """Return the rules this node enforces."""
        rules: list[Rule] = []
        if self.required:
            rules.append(REQUIRED_RULE)
        if self.enum:
            rules.append(enum_rule(self.enum))
        return rules

    def validate(self, value: Any) -> None:
        """Validate *value* against :meth:`rules`.

        Raises:
            ValidationError: With every violated rule's message under
                this type's name.
        """
        messages = [
            message
            for rule in self.rules()
            if (message := rule.apply(self.name, value)) is not None
        ]
        if messages:
            raise ValidationError({self.name: messages})


class StringDataType(DataType):
    type_name = "string"

    def rules(self) -> list[Rule]:
        return super().rules() + [
            Rule("string", lambda value: isinstance(value, str), "The {field} must be a string.")
        ]


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    return isinstance(value, str) and bool(_INTEGER_TEXT.match(value.strip()))


class IntegerDataType(DataType):
    type_name = "integer"

    def rules(self) -> list[Rule]:
        return super().rules() + [
            Rule("integer", _is_integer, "The {field} must be an integer.")
        ]


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


class NumberDataType(DataType):
    type_name = "number"

    def rules(self) -> list[Rule]:
        return super().rules() + [
            Rule("numeric", _is_numeric, "The {field} must be a number.")
        ]


def _is_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    if isinstance(value, int):
        return value in (0, 1)
    return isinstance(value, str) and value.lower() in _BOOLEAN_VALUES


class BooleanDataType(DataType):
    type_name = "boolean"

    def rules(self) -> list[Rule]:
        return super().rules() + [
            Rule("boolean", _is_boolean, "The {field} field must be true or false.")
        ]


class ArrayDataType(DataType):
    """A list whose items are validated against the ``items`` schema, if any."""

    type_name = "array"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._items: Optional[DataType] = None

    def _accessors(self) -> dict[str, Callable[[], Any]]:
        return {"items": lambda: self.items}

    @property
    def items(self) -> Optional[DataType]:
        """The item type, built on first use; ``None`` when undeclared."""
        if self._items is None and self.specification.get("items"):
            self._items = create(self.name, self.specification["items"], self._root)
        return self._items

    def rules(self) -> list[Rule]:
        return super().rules() + [
            Rule("array", lambda value: isinstance(value, (list, tuple)), "The {field} must be an array.")
        ]

    def validate(self, value: Any) -> None:
        super().validate(value)
        if value is None or self.items is None:
            return
        for item in value:
            self.items.validate(item)


class ObjectDataType(DataType):
    """A mapping validated property by property.

    The property map is built from the schema's ``properties`` the first
    time it is needed and reused afterwards.
    """

    type_name = "object"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._properties: Optional[dict[str, DataType]] = None

    def _accessors(self) -> dict[str, Callable[[], Any]]:
        return {"properties": lambda: self.properties}

    @property
    def properties(self) -> dict[str, DataType]:
        if self._properties is None:
            declared = self.specification.get("properties") or {}
            self._properties = {
                name: create(name, schema, self._root) for name, schema in declared.items()
            }
        return self._properties

    @property
    def required_properties(self) -> list[str]:
        declared = self.specification.get("required")
        return list(declared) if isinstance(declared, list) else []

    def validate(self, value: Any) -> None:
        """Validate a mapping against this schema.

        Raises:
            ValidationError: If the value is not a mapping or a property
                listed in ``required`` is missing. Raised before any
                property is looked at.
            InvalidArgumentError: If the value carries a property the
                schema does not declare.
        """
        if value is None:
            if self.required:
                raise ValidationError({self.name: [REQUIRED_RULE.message.format(field=self.name)]})
            return
        if not isinstance(value, Mapping):
            raise ValidationError({self.name: [f"The {self.name} must be an object."]})

        missing = [name for name in self.required_properties if name not in value]
        if missing:
            raise ValidationError(
                {name: [REQUIRED_RULE.message.format(field=name)] for name in missing}
            )

        for name, property_value in value.items():
            self.find_property(name).validate(property_value)

    def find_property(self, path: str) -> DataType:
        """Locate a nested property by ``.``- or ``/``-separated path.

        Raises:
            InvalidArgumentError: If a segment is not a declared property,
                or the path continues below a non-object property.
        """
        head, _, tail = _split_once(path)
        if head not in self.properties:
            raise InvalidArgumentError(f'Invalid property specified ("{head}")')

        found = self.properties[head]
        if tail:
            if not isinstance(found, ObjectDataType):
                raise InvalidArgumentError(f'Invalid property specified ("{tail}")')
            return found.find_property(tail)
        return found


def _split_once(path: str) -> tuple[str, str, str]:
    match = _PROPERTY_PATH.search(path)
    if match is None:
        return path, "", ""
    return path[: match.start()], match.group(), path[match.end():]


VARIANTS: dict[str, type[DataType]] = {
    variant.type_name: variant
    for variant in (
        StringDataType,
        IntegerDataType,
        NumberDataType,
        BooleanDataType,
        ArrayDataType,
        ObjectDataType,
    )
}


def create(
    name: str,
    specification: Optional[Mapping[str, Any]],
    root: Optional[SpecificationView] = None,
) -> DataType:
    """Build the :class:`DataType` variant declared by *specification*.

    Raises:
        ConfigurationError: If the node has no ``type`` (including a node
            that is ``None`` because its reference was allowed to fail).
        InvalidArgumentError: If the ``type`` is not a known variant.
    """
    type_name = specification.get("type") if isinstance(specification, Mapping) else None
    if not type_name:
        raise ConfigurationError(f'Specification for "{name}" does not contain a "type"')
    variant = VARIANTS.get(type_name) if isinstance(type_name, str) else None
    if variant is None:
        raise InvalidArgumentError(f'Unsupported data type "{type_name}" for "{name}"')
    return variant(name, specification, root)
