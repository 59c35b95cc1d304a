"""
Environment variable resolution for proxy settings.

Each setting is looked up once by name. Missing variables yield the declared
default untouched; present variables are handed to a decoder. Decoders never
raise: a value that cannot be decoded is kept as the raw string, so a typo in
the environment degrades a single setting instead of aborting startup.
"""

from __future__ import annotations

import json
import os
from typing import Any, Callable, Mapping, Optional, TypeVar

T = TypeVar("T")

Decoder = Callable[[str], Any]


def _reject_constant(name: str) -> Any:
    # NaN/Infinity are not JSON; treat them like any other undecodable text.
    raise ValueError(f"non-standard JSON constant {name!r}")


def _parse_number(text: str) -> Any:
    # JSON has one number type: "1.0" and "1e3" are the integers 1 and 1000.
    value = float(text)
    return int(value) if value.is_integer() else value


def decode_structured(raw: str) -> Any:
    """Decode ``raw`` as a JSON scalar or composite, else return it unchanged.

    ``"true"`` -> ``True``, ``"4"`` -> ``4``, ``"0.2"`` -> ``0.2``,
    ``"1e3"`` -> ``1000``, ``"null"`` -> ``None``,
    ``"not json"`` -> ``"not json"``.
    """
    try:
        return json.loads(raw, parse_float=_parse_number, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return raw


def decode_opaque(raw: str) -> str:
    """Keep the value verbatim.

    Used for API keys, which may be comma-delimited lists or look numeric.
    """
    return raw


def resolve(
    name: str,
    default: T,
    *,
    decoder: Decoder = decode_structured,
    environ: Optional[Mapping[str, str]] = None,
) -> T:
    """Return the decoded value of environment variable ``name``.

    Parameters
    ----------
    name : str
        Environment variable name, e.g. ``PORT``.
    default : Any
        Returned as-is (``None`` included) when the variable is not set.
    decoder : callable, optional
        Decode rule applied to the raw string when the variable is set.
    environ : Mapping[str, str], optional
        Environment to read from. Defaults to ``os.environ``.
    """
    env = os.environ if environ is None else environ
    raw = env.get(name)
    if raw is None:
        return default
    return decoder(raw)
