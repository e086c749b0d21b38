"""Client configuration loading and precedence resolution.

* **Config files** -- A JSON or YAML file deserialised into a
  :class:`~openapi_consumer.models.ClientConfig` by
  :func:`load_client_config`.
* **Project-local config** -- ``./openapi-consumer.json`` is picked up
  automatically when no other file is named.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables and config files into the effective
  :class:`~openapi_consumer.models.ClientConfig`.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from openapi_consumer.exceptions import ConfigurationError
from openapi_consumer.models import ClientConfig

PROJECT_CONFIG_FILENAME = "openapi-consumer.json"

ENV_CONFIG = "OPENAPI_CONSUMER_CONFIG"
ENV_HOST = "OPENAPI_CONSUMER_HOST"
ENV_BASE_PATH = "OPENAPI_CONSUMER_BASE_PATH"
ENV_SCHEME = "OPENAPI_CONSUMER_SCHEME"


# --- Config files ---


def load_client_config(path: str | Path) -> ClientConfig:
    """Load and validate a client config file.

    ``.yaml`` and ``.yml`` files are read as YAML, everything else as JSON.

    Args:
        path: Location of the config file.

    Returns:
        The deserialised :class:`~openapi_consumer.models.ClientConfig`.

    Raises:
        ConfigurationError: If the file does not exist, cannot be parsed,
            or fails Pydantic validation.
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Invalid config at {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid config at {path}: expected a mapping, got {type(data).__name__}"
        )

    try:
        return ClientConfig.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Invalid config at {path}: {exc}") from exc


def find_project_config() -> Optional[Path]:
    """Return ``./openapi-consumer.json`` if it exists, else ``None``."""
    path = Path.cwd() / PROJECT_CONFIG_FILENAME
    return path if path.is_file() else None


# --- Precedence resolution ---


def resolve_config(
    config_path: Optional[str] = None,
    cli_host: Optional[str] = None,
    cli_base_path: Optional[str] = None,
    cli_scheme: Optional[str] = None,
) -> ClientConfig:
    """Resolve the client config with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_host``, ``cli_base_path``, ``cli_scheme``)
        2. Environment variables (``OPENAPI_CONSUMER_HOST``,
           ``OPENAPI_CONSUMER_BASE_PATH``, ``OPENAPI_CONSUMER_SCHEME``)
        3. Config file (``config_path``, else ``OPENAPI_CONSUMER_CONFIG``)
        4. Project config (``./openapi-consumer.json``)
        5. Defaults

    Returns:
        The effective :class:`~openapi_consumer.models.ClientConfig`.

    Raises:
        ConfigurationError: If a named config file is missing or invalid.
    """
    # 3 + 4. Pick the config file
    file_path: Optional[str | Path] = config_path or os.environ.get(ENV_CONFIG) or None
    if file_path is None:
        file_path = find_project_config()

    # 5. Defaults
    config = load_client_config(file_path) if file_path is not None else ClientConfig()

    overrides: dict[str, Any] = {}
    # 2. Environment variables
    for field, env_var in (("host", ENV_HOST), ("base_path", ENV_BASE_PATH), ("scheme", ENV_SCHEME)):
        value = os.environ.get(env_var)
        if value:
            overrides[field] = value
    # 1. CLI flags (highest precedence)
    for field, value in (("host", cli_host), ("base_path", cli_base_path), ("scheme", cli_scheme)):
        if value is not None:
            overrides[field] = value

    if overrides:
        config = config.model_copy(update=overrides)
    return config
