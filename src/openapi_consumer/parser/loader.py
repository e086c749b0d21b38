"""Load API descriptions from a URL, local file, or stdin.

This module handles all I/O for fetching raw Swagger documents and turning
them into Python dictionaries. It supports JSON and YAML with automatic
format detection, and checks that the document declares a Swagger 2.x
version.

The two public functions are:

* :func:`load_document` -- Load and parse a document from any supported source.
* :func:`validate_swagger_version` -- Check and return the ``swagger``
  version string, rejecting OpenAPI 3.x documents whose parameter model
  (no ``body``/``formData`` locations) this package does not implement.

After loading, the raw dict is handed to
:class:`~openapi_consumer.client.Client`, which resolves ``$ref`` pointers.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from openapi_consumer.exceptions import SpecParseError


def load_document(source: str) -> dict[str, Any]:
    """Load an API description from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecParseError: If the source cannot be loaded or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except Exception as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document over HTTP, using the content type as a format hint."""
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a document from disk; the extension decides the format when known."""
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Document not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read document {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Document is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    JSON is tried first unless the hint says YAML; valid JSON is also valid
    YAML, but the JSON parser is stricter and faster.

    Raises:
        SpecParseError: If the content cannot be parsed as either format,
            or does not decode to a mapping.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
        else:
            if not isinstance(result, dict):
                raise SpecParseError(
                    f"Document must be a JSON/YAML object (got {type(result).__name__})"
                )
            return result

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse document as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc

    if not isinstance(result, dict):
        raise SpecParseError(
            "Document must be a JSON/YAML object (got "
            f"{type(result).__name__ if result is not None else 'empty document'})"
        )
    return result


def validate_swagger_version(document: dict[str, Any]) -> str:
    """Validate and return the Swagger version string.

    Args:
        document: The parsed document.

    Returns:
        The version string (e.g. ``"2.0"``).

    Raises:
        SpecParseError: If the document is OpenAPI 3.x, declares no version,
            or declares an unsupported one.
    """
    if "openapi" in document:
        raise SpecParseError(
            f"OpenAPI {document['openapi']} is not supported. "
            "Only Swagger 2.x documents are supported."
        )

    version = document.get("swagger")
    if version is None:
        raise SpecParseError("Missing 'swagger' field. Is this a Swagger 2.x document?")

    version_str = str(version)
    if version_str.startswith("2."):
        return version_str

    raise SpecParseError(
        f"Unsupported Swagger version: {version_str}. Only Swagger 2.x is supported."
    )
