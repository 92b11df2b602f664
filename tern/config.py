"""
Front-end configuration.

Settings are read from ``tern.json`` in the working directory or from
``~/.tern/config.json``; the first file found wins. Every setting has a
default, so no file is required.
"""
import json
import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


CONFIG_FILE = "tern.json"
CONFIG_PATHS = [CONFIG_FILE, os.path.join("~", ".tern", "config.json")]


class ConfigError(ValueError):
    """Raised for a configuration file that cannot be used."""


class FrontendConfig(BaseModel):
    """Options for reporting diagnostics. They never change the parse result."""
    model_config = ConfigDict(frozen=True, extra='forbid')

    max_errors: Optional[int] = Field(default=None, ge=1)
    show_context: bool = True
    show_suggestions: bool = True
    color: bool = True


def find_config_file(paths=None):
    """Return the first existing config path, or None."""
    for p in paths or CONFIG_PATHS:
        p = os.path.expanduser(p)
        if os.path.exists(p):
            return p
    return None


def load_config(path=None, **overrides):
    """
    Load configuration from ``path`` (or the default search paths).

    Keyword overrides whose value is None are ignored, so CLI flags can be
    passed straight through.
    """
    path = path or find_config_file()
    data = {}
    if path is not None:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return FrontendConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path or 'overrides'}: {e}") from e
