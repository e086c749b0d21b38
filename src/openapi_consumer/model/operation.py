"""Operation and Parameter objects materialised from the resolved document.

An :class:`Operation` is one verb + path template with its parameter
contract. It is built by :meth:`~openapi_consumer.client.Client.operation`
on first reference and memoised there; the operation in turn builds its
:class:`Parameter` list once, in declaration order, and each parameter
builds its :class:`~openapi_consumer.model.datatypes.DataType` on first use.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from openapi_consumer.exceptions import ValidationError
from openapi_consumer.model.datatypes import REQUIRED_RULE, DataType, create, is_empty
from openapi_consumer.model.view import SpecificationView
from openapi_consumer.models import ParameterLocation


class Parameter:
    """One named, located input of an operation.

    Body parameters take their data type from the nested ``schema`` node;
    every other location describes its type inline.

    Args:
        specification: The parameter node from the operation's
            ``parameters`` array.
        root: The document-root view.
    """

    def __init__(
        self,
        specification: Mapping[str, Any],
        root: Optional[SpecificationView] = None,
    ) -> None:
        self.specification = specification
        self._root = root
        self._data_type: Optional[DataType] = None
        self._view = SpecificationView(
            self,
            specification,
            accessors={"dataType": lambda: self.data_type},
            root=root,
        )

    def __repr__(self) -> str:
        return f"Parameter(name={self.name!r}, in={self.location!r})"

    def get(self, name: str) -> Any:
        return self._view.get(name)

    @property
    def name(self) -> str:
        return self.get("name")

    @property
    def location(self) -> str:
        """The raw ``in`` value (``path``, ``query``, ``header``, ``body``, ``formData``)."""
        return self.get("in")

    @property
    def required(self) -> bool:
        return bool(self.get("required"))

    @property
    def is_body(self) -> bool:
        return self.location == ParameterLocation.BODY.value

    @property
    def data_type(self) -> DataType:
        """The parameter's validator, built on first access.

        Raises:
            ConfigurationError: If the describing node has no ``type``.
            InvalidArgumentError: If the ``type`` is unknown.
        """
        if self._data_type is None:
            source = self.get("schema") if self.is_body else self.specification
            self._data_type = create(self.name, source, self._root)
        return self._data_type

    def validate(self, value: Any) -> None:
        """Check presence for required parameters, then the data type rules.

        Raises:
            ValidationError: If a required value is missing or empty, or
                the value breaks a data type rule.
        """
        if self.required and is_empty(value):
            raise ValidationError({self.name: [REQUIRED_RULE.message.format(field=self.name)]})
        self.data_type.validate(value)


class Operation:
    """One verb + path endpoint.

    Args:
        operation_id: Effective id (declared ``operationId`` or derived).
        verb: Lower-case HTTP verb.
        path: URI path template, e.g. ``"/users/{id}"``.
        specification: The operation node of the document.
        path_parameters: Parameters declared on the path item, shared by
            every verb of that path.
        root: The document-root view.

    Example::

        op = client.operation("getUserById")
        op.verb                      # "get"
        op.path                      # "/users/{id}"
        [p.name for p in op.parameters.values()]
        op.get("consumes")           # falls back to the document root
    """

    def __init__(
        self,
        operation_id: str,
        verb: str,
        path: str,
        specification: Mapping[str, Any],
        path_parameters: Optional[list[Mapping[str, Any]]] = None,
        root: Optional[SpecificationView] = None,
    ) -> None:
        self.id = operation_id
        self.verb = verb
        self.path = path
        self.specification = specification
        self._path_parameters = list(path_parameters or [])
        self._root = root
        self._parameters: Optional[dict[str, Parameter]] = None
        self._view = SpecificationView(
            self,
            specification,
            accessors={"parameters": lambda: self.parameters},
            fields={"verb": "verb", "path": "path", "id": "id"},
            root=root,
        )

    def __repr__(self) -> str:
        return f"Operation({self.id!r}, {self.verb.upper()} {self.path})"

    def get(self, name: str) -> Any:
        return self._view.get(name)

    @property
    def parameters(self) -> dict[str, Parameter]:
        """Parameters keyed by name, in declaration order, built once."""
        if self._parameters is None:
            self._parameters = {}
            for node in _merge_parameters(
                self._path_parameters, self.specification.get("parameters") or []
            ):
                parameter = Parameter(node, self._root)
                self._parameters[parameter.name] = parameter
        return self._parameters

    def parameter(self, name: str) -> Optional[Parameter]:
        return self.parameters.get(name)

    @property
    def consumes(self) -> list[str]:
        return list(self.get("consumes") or [])

    @property
    def produces(self) -> list[str]:
        return list(self.get("produces") or [])

    @property
    def summary(self) -> Optional[str]:
        return self.get("summary")

    @property
    def deprecated(self) -> bool:
        return bool(self.get("deprecated"))


def _merge_parameters(
    path_params: list[Mapping[str, Any]],
    op_params: list[Mapping[str, Any]],
) -> list[Mapping[str, Any]]:
    """Merge path-level and operation-level parameter nodes.

    Operation-level nodes override path-level nodes with the same ``name``
    and ``in``. Path-level nodes come first.
    """
    overridden = {
        (param.get("name", ""), param.get("in", ""))
        for param in op_params
        if isinstance(param, Mapping)
    }
    merged = [
        param
        for param in path_params
        if isinstance(param, Mapping)
        and (param.get("name", ""), param.get("in", "")) not in overridden
    ]
    merged.extend(param for param in op_params if isinstance(param, Mapping))
    return merged
