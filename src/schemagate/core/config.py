# src/schemagate/core/config.py
"""
Configuration schema and loading for schemagate.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction, and every invalid value
(unknown mode, malformed schema criterion) fails here, at load time.
"""

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_serializer, field_validator

from schemagate.contracts.errors import ConfigurationError
from schemagate.contracts.schema_key import SchemaCriterion, SchemaKeyParseError
from schemagate.sqlquery.output import OutputSpec

DEFAULT_CONTEXTS_CRITERION = "iglu:com.snowplowanalytics.snowplow/contexts/jsonschema/1-0-*"
DEFAULT_UNSTRUCT_EVENT_CRITERION = "iglu:com.snowplowanalytics.snowplow/unstruct_event/jsonschema/1-0-*"


class ValidationSettings(BaseModel):
    """Schema validation orchestrator configuration.

    Example YAML:
        validation:
          contexts_criterion: "iglu:com.snowplowanalytics.snowplow/contexts/jsonschema/1-0-*"
          unstruct_event_field: ue_properties
          max_workers: 4
    """

    model_config = {"frozen": True, "extra": "forbid", "arbitrary_types_allowed": True}

    contexts_criterion: SchemaCriterion = Field(
        default=SchemaCriterion.parse(DEFAULT_CONTEXTS_CRITERION),
        description="Schema family the contexts envelope must belong to",
    )
    unstruct_event_criterion: SchemaCriterion = Field(
        default=SchemaCriterion.parse(DEFAULT_UNSTRUCT_EVENT_CRITERION),
        description="Schema family the unstructured-event envelope must belong to",
    )
    contexts_field: str = Field(
        default="contexts",
        min_length=1,
        description="Field name reported in NotJson violations for the contexts slot",
    )
    unstruct_event_field: str = Field(
        default="ue_properties",
        min_length=1,
        description="Field name reported in NotJson violations for the unstructured-event slot",
    )
    context_data_criterion: SchemaCriterion | None = Field(
        default=None,
        description="Schema family every attached context must belong to (None = any)",
    )
    unstruct_event_data_criterion: SchemaCriterion | None = Field(
        default=None,
        description="Schema family the attached unstructured event must belong to (None = any)",
    )
    max_workers: int = Field(
        default=1,
        ge=1,
        description="Concurrent registry checks per event (1 = inline, no thread pool)",
    )

    @field_validator(
        "contexts_criterion",
        "unstruct_event_criterion",
        "context_data_criterion",
        "unstruct_event_data_criterion",
        mode="before",
    )
    @classmethod
    def parse_criterion(cls, v: Any) -> Any:
        """Accept criterion strings such as 'iglu:vendor/name/jsonschema/1-0-*'."""
        if isinstance(v, str):
            try:
                return SchemaCriterion.parse(v)
            except SchemaKeyParseError as e:
                raise ValueError(f"Invalid schema criterion {v!r}: {e}") from e
        return v

    @field_serializer(
        "contexts_criterion",
        "unstruct_event_criterion",
        "context_data_criterion",
        "unstruct_event_data_criterion",
    )
    def serialize_criterion(self, v: SchemaCriterion | None) -> str | None:
        return v.as_string() if v is not None else None


class LoggingSettings(BaseModel):
    """Logging configuration passed to configure_logging()."""

    model_config = {"frozen": True, "extra": "forbid"}

    json_output: bool = Field(default=False, description="Emit JSON log lines instead of console output")
    level: str = Field(default="INFO", description="Root log level")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        normalized = v.upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level {v!r}")
        return normalized


class SchemagateSettings(BaseModel):
    """Top-level schemagate configuration.

    Named outputs are SQL query enrichment output specs, built once here
    and reused for every event.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    outputs: dict[str, OutputSpec] = Field(
        default_factory=dict,
        description="Named row-to-context output specifications",
    )

    @field_validator("outputs", mode="before")
    @classmethod
    def parse_outputs(cls, v: Any) -> Any:
        """Accept outputs in enrichment JSON shape ({json: {...}, expectedRows: ...})."""
        if not isinstance(v, dict):
            return v
        parsed: dict[str, Any] = {}
        for name, spec in v.items():
            if isinstance(spec, dict) and "json" in spec:
                try:
                    parsed[name] = OutputSpec.from_dict(spec)
                except ConfigurationError as e:
                    raise ValueError(f"outputs.{name}: {e}") from e
            else:
                parsed[name] = spec
        return parsed


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values."""

    def replacer(match: re.Match[str]) -> str:
        env_value = os.environ.get(match.group(1))
        if env_value is not None:
            return env_value
        if match.group(2) is not None:
            return match.group(2)
        # No env var and no default - keep original (will likely fail validation)
        return match.group(0)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _ENV_VAR_PATTERN.sub(replacer, value)
        if isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        if isinstance(value, list):
            return [_expand_value(item) for item in value]
        return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lower_keys(value: Any, depth: int) -> Any:
    # Dynaconf upper-cases keys; only the settings tree itself is lowered,
    # output names below `outputs` keep their case
    if isinstance(value, dict) and depth > 0:
        return {str(k).lower(): _lower_keys(v, depth - 1) for k, v in value.items()}
    return value


def load_settings(config_path: Path) -> SchemagateSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (SCHEMAGATE_*) - highest priority
    2. Config file
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: SCHEMAGATE_VALIDATION__MAX_WORKERS=4 for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated SchemagateSettings instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigurationError: If configuration fails validation
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="SCHEMAGATE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config: dict[str, Any] = {}
    for key, value in dynaconf_settings.as_dict().items():
        if key in internal_keys:
            continue
        section = key.lower()
        raw_config[section] = value if section == "outputs" else _lower_keys(value, depth=1)

    raw_config = _expand_env_vars(raw_config)

    try:
        return SchemagateSettings(**raw_config)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e
