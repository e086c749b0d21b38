"""Client layer: operation registry, request builder and HTTP transport.

Classes:
    :class:`Client` -- owns the resolved document and materialises operations.
    :class:`RequestBuilder` -- one call attempt: data, validation, outcome.
    :class:`SmartFill` -- short-name index used by ``with_(..., smart_fill=True)``.
    :class:`Transport` -- blocking transport over :class:`httpx.Client`.

Example::

    from openapi_consumer.client import Client

    with Client.from_source("petstore.json") as client:
        request = client.request("getPetById").execute({"petId": 1})
"""

from openapi_consumer.client.client import Client
from openapi_consumer.client.request import RequestBuilder
from openapi_consumer.client.smartfill import SmartFill
from openapi_consumer.client.transport import Transport

__all__ = ["Client", "RequestBuilder", "SmartFill", "Transport"]
