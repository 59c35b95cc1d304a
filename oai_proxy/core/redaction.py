"""
Display-safe view of the proxy configuration.

``list_config`` is the only path by which configuration values leave the
process. Sensitive values are replaced by a fixed mask regardless of length,
and settings without a meaningful value are left out entirely.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Optional

from oai_proxy.core.config import CONFIG_FIELDS, ConfigField, ProxyConfig, get_config

REDACTED = "********"

SENSITIVE_FIELDS: frozenset[str] = frozenset(
    {
        "openai_key",
        "proxy_key",
        "google_sheets_key",
        "google_sheets_spreadsheet_id",
    }
)


def check_sensitive_fields(fields: Iterable[ConfigField], sensitive: Iterable[str] = SENSITIVE_FIELDS) -> None:
    """Raise ``ValueError`` if a sensitive name is not a declared field."""
    declared = {f.attr for f in fields}
    unknown = sorted(set(sensitive) - declared)
    if unknown:
        raise ValueError(f"Sensitive fields missing from schema: {', '.join(unknown)}")


check_sensitive_fields(CONFIG_FIELDS)


def display_value(value: Any) -> str:
    """Render a resolved value the way the info page shows it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(display_value(item) for item in value)
    if isinstance(value, Mapping):
        # Nested read-only mappings are serialised as plain objects.
        return json.dumps(value, default=dict, separators=(",", ":"))
    return str(value)


def list_config(config: Optional[ProxyConfig] = None) -> dict[str, str]:
    """Return display strings for every set field, masking sensitive ones.

    Parameters
    ----------
    config : ProxyConfig, optional
        Snapshot to render. Defaults to the process-wide snapshot.

    Returns
    -------
    dict[str, str]
        Display key to display string, in schema order.
    """
    if config is None:
        config = get_config()

    result: dict[str, str] = {}
    for spec in CONFIG_FIELDS:
        value = display_value(getattr(config, spec.attr))
        if value in ("", "undefined"):
            continue
        result[spec.key] = REDACTED if spec.attr in SENSITIVE_FIELDS else value
    return result
