"""Model objects read from the resolved document.

* :mod:`~openapi_consumer.model.view` -- the shared property lookup chain.
* :mod:`~openapi_consumer.model.datatypes` -- validators keyed by ``type``.
* :mod:`~openapi_consumer.model.operation` -- :class:`Operation` and
  :class:`Parameter`.
"""

from openapi_consumer.model.datatypes import DataType, ObjectDataType, create
from openapi_consumer.model.operation import Operation, Parameter
from openapi_consumer.model.view import SpecificationView

__all__ = [
    "DataType",
    "ObjectDataType",
    "Operation",
    "Parameter",
    "SpecificationView",
    "create",
]
