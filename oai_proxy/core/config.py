"""
Proxy configuration schema and the process-wide settings snapshot.

Settings are read from environment variables exactly once at startup and
frozen. Other modules receive the resulting ``ProxyConfig`` as a parameter;
``get_config`` exists only for the process entrypoint.
"""

from __future__ import annotations

import enum
import logging
import os
import types
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Mapping, Optional

from oai_proxy.core.resolver import Decoder, decode_opaque, decode_structured, resolve

logger = logging.getLogger(__name__)

DEFAULT_REJECT_MESSAGE = "This content violates /aicg/'s acceptable use policy."

LOG_LEVELS = ("debug", "info", "warn", "error")
QUOTA_DISPLAY_MODES = ("none", "simple", "full")
PROMPT_LOGGING_BACKENDS = ("google_sheets",)
QUEUE_MODES = ("fair", "random", "none")


class FieldKind(str, enum.Enum):
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"
    ENUM = "enum"
    OPTIONAL_STRING = "optional_string"


@dataclass(frozen=True)
class ConfigField:
    """One environment-backed setting.

    ``default=None`` means the setting is absent unless the variable is set.
    ``default_factory`` receives the deployment environment name and takes
    precedence over ``default``.
    """

    attr: str
    env: str
    key: str
    kind: FieldKind
    default: Any = None
    choices: tuple[str, ...] = ()
    decoder: Decoder = decode_structured
    default_factory: Optional[Callable[[str], Any]] = None

    def default_for(self, environment: str) -> Any:
        if self.default_factory is not None:
            return self.default_factory(environment)
        return self.default

    @property
    def optional(self) -> bool:
        return self.default is None and self.default_factory is None


CONFIG_FIELDS: tuple[ConfigField, ...] = (
    ConfigField("port", "PORT", "port", FieldKind.INTEGER, 7860),
    # Single key or comma-delimited list of keys; never decoded.
    ConfigField("openai_key", "OPENAI_KEY", "openaiKey", FieldKind.STRING, "", decoder=decode_opaque),
    ConfigField("proxy_key", "PROXY_KEY", "proxyKey", FieldKind.STRING, ""),
    ConfigField("model_rate_limit", "MODEL_RATE_LIMIT", "modelRateLimit", FieldKind.INTEGER, 4),
    ConfigField("max_output_tokens", "MAX_OUTPUT_TOKENS", "maxOutputTokens", FieldKind.INTEGER, 300),
    ConfigField("reject_disallowed", "REJECT_DISALLOWED", "rejectDisallowed", FieldKind.BOOLEAN, False),
    ConfigField("reject_sample_rate", "REJECT_SAMPLE_RATE", "rejectSampleRate", FieldKind.FLOAT, 0.2),
    ConfigField("reject_message", "REJECT_MESSAGE", "rejectMessage", FieldKind.STRING, DEFAULT_REJECT_MESSAGE),
    ConfigField("log_level", "LOG_LEVEL", "logLevel", FieldKind.ENUM, "info", choices=LOG_LEVELS),
    ConfigField(
        "check_keys",
        "CHECK_KEYS",
        "checkKeys",
        FieldKind.BOOLEAN,
        default_factory=lambda environment: environment == "production",
    ),
    ConfigField(
        "quota_display_mode", "QUOTA_DISPLAY_MODE", "quotaDisplayMode", FieldKind.ENUM, "full",
        choices=QUOTA_DISPLAY_MODES,
    ),
    ConfigField("prompt_logging", "PROMPT_LOGGING", "promptLogging", FieldKind.BOOLEAN, False),
    ConfigField(
        "prompt_logging_backend", "PROMPT_LOGGING_BACKEND", "promptLoggingBackend", FieldKind.ENUM,
        choices=PROMPT_LOGGING_BACKENDS,
    ),
    # Base64-encoded Google Sheets service account key.
    ConfigField("google_sheets_key", "GOOGLE_SHEETS_KEY", "googleSheetsKey", FieldKind.OPTIONAL_STRING),
    ConfigField(
        "google_sheets_spreadsheet_id", "GOOGLE_SHEETS_SPREADSHEET_ID", "googleSheetsSpreadsheetId",
        FieldKind.OPTIONAL_STRING,
    ),
    ConfigField("queue_mode", "QUEUE_MODE", "queueMode", FieldKind.ENUM, "fair", choices=QUEUE_MODES),
)


@dataclass(frozen=True)
class ProxyConfig:
    """Immutable proxy settings derived from environment variables.

    Values normally match the declared kind of their field, but malformed
    environment input is kept as the raw string rather than rejected. See
    ``validate_config``.
    """

    port: Any = 7860
    openai_key: Any = ""
    proxy_key: Any = ""
    model_rate_limit: Any = 4
    max_output_tokens: Any = 300
    reject_disallowed: Any = False
    reject_sample_rate: Any = 0.2
    reject_message: Any = DEFAULT_REJECT_MESSAGE
    log_level: Any = "info"
    check_keys: Any = False
    quota_display_mode: Any = "full"
    prompt_logging: Any = False
    prompt_logging_backend: Any = None
    google_sheets_key: Any = None
    google_sheets_spreadsheet_id: Any = None
    queue_mode: Any = "fair"
    environment: str = field(default="development", compare=False)


def _matches_kind(spec: ConfigField, value: Any) -> bool:
    if spec.kind is FieldKind.INTEGER:
        return isinstance(value, int) and not isinstance(value, bool)
    if spec.kind is FieldKind.FLOAT:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if spec.kind is FieldKind.BOOLEAN:
        return isinstance(value, bool)
    if spec.kind is FieldKind.ENUM:
        return value in spec.choices
    return isinstance(value, str)


def validate_config(config: ProxyConfig) -> list[str]:
    """Return a description of every value that does not fit its field.

    Only enum values are quoted in messages; other fields may hold secrets.
    """
    problems: list[str] = []
    for spec in CONFIG_FIELDS:
        value = getattr(config, spec.attr)
        if value is None and spec.optional:
            continue
        if _matches_kind(spec, value):
            continue
        if spec.kind is FieldKind.ENUM:
            problems.append(f"{spec.env} must be one of {', '.join(spec.choices)}; got {value!r}")
        else:
            problems.append(f"{spec.env} should be {spec.kind.value}; got {type(value).__name__}")
    return problems


def _freeze(value: Any) -> Any:
    """Return ``value`` with JSON arrays as tuples and objects as read-only mappings."""
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, dict):
        return types.MappingProxyType({k: _freeze(v) for k, v in value.items()})
    return value


def load_config(environ: Optional[Mapping[str, str]] = None) -> ProxyConfig:
    """Resolve every declared field, in schema order, into a snapshot.

    Parameters
    ----------
    environ : Mapping[str, str], optional
        Environment to read from. Defaults to ``os.environ``.

    Returns
    -------
    ProxyConfig
        Frozen snapshot. Malformed values are kept and reported as warnings.
    """
    env = os.environ if environ is None else environ
    environment = env.get("APP_ENV", "development")

    values = {
        spec.attr: _freeze(resolve(spec.env, spec.default_for(environment), decoder=spec.decoder, environ=env))
        for spec in CONFIG_FIELDS
    }
    config = ProxyConfig(environment=environment, **values)

    for problem in validate_config(config):
        logger.warning("Invalid configuration value: %s", problem)
    return config


@lru_cache(maxsize=1)
def get_config() -> ProxyConfig:
    """Load the process-wide snapshot on first call and return it thereafter."""
    return load_config()
