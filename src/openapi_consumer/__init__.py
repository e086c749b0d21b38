"""openapi_consumer -- call Swagger 2.x APIs straight from their description.

The package resolves a document's internal ``$ref`` pointers, builds
validators from its schemas, and assembles validated requests without any
per-endpoint code::

    from openapi_consumer import Client

    with Client.from_source("petstore.json") as client:
        request = client.request("addPet")
        request.with_({"name": "rex"}, smart_fill=True).execute()
        if request.succeeded():
            print(request.json)

Modules:
    parser: Document loading and ``$ref`` resolution.
    model: Operations, parameters and data type validators.
    client: Operation registry, request builder and HTTP transport.
    models: Pydantic configuration models shared across the package.
    config: Config file loading and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer CLI (``openapi-consumer``).
"""

__version__ = "0.1.0"

from openapi_consumer.client import Client, RequestBuilder  # noqa: E402
from openapi_consumer.exceptions import (  # noqa: E402
    ConfigurationError,
    ConsumerError,
    InvalidArgumentError,
    ResolutionError,
    SpecParseError,
    TransportError,
    ValidationError,
)
from openapi_consumer.models import ClientConfig  # noqa: E402

__all__ = [
    "__version__",
    "Client",
    "ClientConfig",
    "ConfigurationError",
    "ConsumerError",
    "InvalidArgumentError",
    "RequestBuilder",
    "ResolutionError",
    "SpecParseError",
    "TransportError",
    "ValidationError",
]
