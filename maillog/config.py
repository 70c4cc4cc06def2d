"""Configuration loading from an optional YAML file and environment variables.

Precedence: environment > YAML file > defaults. The YAML document is checked
against ``CONFIG_SCHEMA`` before use.
"""

import codecs
import logging
import os
from dataclasses import dataclass, field

import jsonschema
import yaml

from maillog.errors import ConfigError
from maillog.models import Component

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

CONFIG_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "reference_year": {"type": ["integer", "null"], "minimum": 1970, "maximum": 9999},
        "log_level": {"enum": list(LOG_LEVELS)},
        "encoding": {"type": "string", "minLength": 1},
        "subsystem_aliases": {
            "type": "object",
            "propertyNames": {"pattern": "^postfix/"},
            "additionalProperties": {"enum": [c.value for c in Component]},
        },
    },
    "additionalProperties": False,
}


@dataclass(frozen=True)
class Config:
    reference_year: int | None = None
    log_level: str = "INFO"
    encoding: str = "utf-8"
    subsystem_aliases: dict[str, str] = field(default_factory=dict)


def load_yaml_config(path: str | None) -> dict:
    """Load and validate a YAML config file. Returns empty dict if no path.

    Raises:
        ConfigError: If the file is not valid YAML or fails the schema.
    """
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    validator = jsonschema.Draft202012Validator(CONFIG_SCHEMA)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if errors:
        messages = "; ".join(e.message for e in errors)
        raise ConfigError(f"Invalid config {path}: {messages}")

    logger.info("Loaded YAML config from %s", path)
    return data


def load_config(yaml_data: dict | None = None) -> Config:
    """Build Config from parsed YAML data and environment variables.

    Raises:
        ConfigError: If a resolved setting is not usable.
    """
    yaml_data = yaml_data or {}

    raw_year = os.environ.get("MAILLOG_REFERENCE_YEAR")
    if raw_year is not None:
        try:
            reference_year = int(raw_year)
        except ValueError as exc:
            raise ConfigError(f"MAILLOG_REFERENCE_YEAR must be an integer, got {raw_year!r}") from exc
    else:
        reference_year = yaml_data.get("reference_year", Config.reference_year)

    log_level = os.environ.get(
        "MAILLOG_LOG_LEVEL", yaml_data.get("log_level", Config.log_level)
    ).upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(
            f"Log level must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
        )

    encoding = os.environ.get("MAILLOG_ENCODING", yaml_data.get("encoding", Config.encoding))
    try:
        codecs.lookup(encoding)
    except LookupError as exc:
        raise ConfigError(f"Unknown encoding {encoding!r}") from exc

    return Config(
        reference_year=reference_year,
        log_level=log_level,
        encoding=encoding,
        subsystem_aliases=dict(yaml_data.get("subsystem_aliases", {})),
    )
