"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~openapi_consumer.exceptions.ConsumerError` subclass.
Shell wrappers can inspect the exit code of ``openapi-consumer call`` to tell
a rejected payload apart from a failed request without parsing stderr.

Example::

    $ openapi-consumer call petstore.json addPet -d name=rex
    $ echo $?
    3   # EXIT_VALIDATION_FAILURE -- a required field was missing
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an unknown operation/property."""

EXIT_VALIDATION_FAILURE = 3
"""The supplied data did not satisfy the operation's parameter contract."""

EXIT_REQUEST_FAILED = 4
"""The request was sent but did not succeed (transport failure or unaccepted status)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The API description could not be loaded or parsed."""

EXIT_RESOLUTION_ERROR = 8
"""A ``$ref`` pointer in the API description could not be resolved."""
