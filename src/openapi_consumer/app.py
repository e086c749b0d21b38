"""Typer application and CLI entry point for openapi-consumer.

Two commands sit on top of the library:

* ``openapi-consumer operations SOURCE`` -- list every operation the
  document declares.
* ``openapi-consumer call SOURCE OPERATION`` -- validate caller data,
  send one request and print the response body.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler, invokes the Typer app and
maps any escaping :class:`~openapi_consumer.exceptions.ConsumerError` to its
exit code.

See Also:
    :mod:`openapi_consumer.config`: Config precedence used by ``call``.
    :mod:`openapi_consumer.output`: Output formatting set up in
    :func:`main_callback`.
"""

from __future__ import annotations

import json
import logging
import signal
import sys
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from openapi_consumer import __version__
from openapi_consumer.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_REQUEST_FAILED,
)

app = typer.Typer(
    name="openapi-consumer",
    help="Call Swagger 2.x APIs straight from their description.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"openapi-consumer {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Send the library's log records to stderr when ``--verbose`` is set."""
    logger = logging.getLogger("openapi_consumer")
    if not verbose:
        logger.setLevel(logging.WARNING)
        return
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(
            RichHandler(console=Console(stderr=True), show_path=False, show_time=False)
        )
    logger.setLevel(logging.DEBUG)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~openapi_consumer.output.OutputManager`
    and configures library logging from the CLI flags.
    """
    from openapi_consumer.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("operations")
def operations_command(
    source: str = typer.Argument(..., help="Document path, URL, or '-' for stdin."),
) -> None:
    """List all operations of an API description.

    Example::

        openapi-consumer operations petstore.json
        openapi-consumer --json operations https://petstore.swagger.io/v2/swagger.json
    """
    from openapi_consumer.client import Client
    from openapi_consumer.exceptions import ConsumerError
    from openapi_consumer.output import error, print_table

    try:
        client = Client.from_source(source)
        operations = client.operations()
    except ConsumerError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    rows = [
        [op.id, op.verb.upper(), op.path, op.summary or "-"]
        for op in operations
    ]
    title = client.get("info.title") or "API"
    print_table(
        ["Operation", "Method", "Path", "Summary"],
        rows,
        title=f"{title} -- Operations ({len(rows)})",
    )


@app.command("call")
def call_command(
    source: str = typer.Argument(..., help="Document path, URL, or '-' for stdin."),
    operation: str = typer.Argument(..., help="Operation id or alias."),
    data_pairs: Optional[list[str]] = typer.Option(
        None, "--data-item", "-d", help="Parameter value as key=value (repeatable)."
    ),
    data_json: Optional[str] = typer.Option(
        None, "--data", help="Parameter values as a JSON object."
    ),
    smart_fill: bool = typer.Option(
        True, "--smart-fill/--no-smart-fill", help="Map short and aliased names onto parameters."
    ),
    status: Optional[list[int]] = typer.Option(
        None, "--status", help="Accepted status code (repeatable; default any 2xx)."
    ),
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", help="Client config file (JSON or YAML)."
    ),
    host: Optional[str] = typer.Option(None, "--host", help="Override the document host."),
    base_path: Optional[str] = typer.Option(
        None, "--base-path", help="Override the document basePath."
    ),
    scheme: Optional[str] = typer.Option(None, "--scheme", help="Override the URL scheme."),
) -> None:
    """Call one operation and print the response body.

    Exits 0 when the response status is accepted, otherwise with the
    request-failed exit code. Validation problems exit before anything is
    sent.

    Example::

        openapi-consumer call petstore.json getPetById -d petId=1
        openapi-consumer call petstore.json addPet --data '{"name": "rex"}'
    """
    from openapi_consumer.client import Client
    from openapi_consumer.config import resolve_config
    from openapi_consumer.exceptions import ConsumerError, InvalidArgumentError
    from openapi_consumer.output import debug, error, format_response, info, suggest, warning

    data = _collect_data(data_pairs or [], data_json)
    accepted = status or list(range(200, 300))

    try:
        config = resolve_config(config_path, host, base_path, scheme)
        with Client.from_source(source, config=config) as client:
            try:
                request = client.request(operation)
            except InvalidArgumentError as exc:
                error(str(exc))
                suggest(f"Run: openapi-consumer operations {source}")
                raise typer.Exit(code=exc.exit_code) from None

            if request.operation.deprecated:
                warning(f"Operation {request.operation.id} is deprecated")
            debug(f"Request data: {json.dumps(data, default=str)}")
            request.with_(data, smart_fill=smart_fill).execute()
    except ConsumerError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    response = request.response
    if response is not None:
        info(f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip())
        parsed = request.json
        content_type = response.headers.get("content-type", "")
        format_response(parsed if parsed is not None else (response.text or None), content_type)

    if not request.succeeded(accepted):
        error(str(request.exception) if request.exception else f"Unexpected status {request.status_code}")
        raise typer.Exit(code=EXIT_REQUEST_FAILED)


def _collect_data(pairs: list[str], data_json: Optional[str]) -> dict[str, Any]:
    """Merge ``--data`` JSON and ``-d key=value`` pairs (pairs win)."""
    from openapi_consumer.output import error

    data: dict[str, Any] = {}
    if data_json:
        try:
            parsed = json.loads(data_json)
        except json.JSONDecodeError as exc:
            error(f"--data is not valid JSON: {exc}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
        if not isinstance(parsed, dict):
            error("--data must be a JSON object")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        data.update(parsed)

    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            error(f"Expected key=value, got '{pair}'")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        data[key] = _parse_value(raw)
    return data


def _parse_value(raw: str) -> Any:  # noqa: ANN401
    """Decode *raw* as JSON where possible (``42``, ``true``, ``{...}``), else keep the text."""
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return raw


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``openapi-consumer`` console script.

    Escaping :class:`~openapi_consumer.exceptions.ConsumerError` instances
    exit with the error's ``exit_code``; anything else exits with
    :data:`~openapi_consumer.exit_codes.EXIT_GENERIC_FAILURE`.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from openapi_consumer.exceptions import ConsumerError
        from openapi_consumer.output import error

        if isinstance(exc, ConsumerError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
