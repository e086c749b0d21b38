"""Document parser -- load raw descriptions and resolve ``$ref`` pointers.

This sub-package turns a Swagger 2.x document (JSON or YAML, local file or
remote URL) into the self-contained tree every model object reads from.

Typical usage::

    from openapi_consumer.parser import load_document, resolve_references

    raw = load_document("https://petstore.swagger.io/v2/swagger.json")
    document = resolve_references(raw)

Sub-modules:

* :mod:`~openapi_consumer.parser.loader` -- I/O layer (URL, file, stdin) plus
  format detection and version validation.
* :mod:`~openapi_consumer.parser.pointer` -- Delimiter-aware nested
  get/has/set helpers.
* :mod:`~openapi_consumer.parser.resolver` -- Fixed-point ``$ref``
  resolution with cycle detection.
"""

from openapi_consumer.parser.loader import load_document, validate_swagger_version
from openapi_consumer.parser.resolver import resolve_references

__all__ = ["load_document", "validate_swagger_version", "resolve_references"]
