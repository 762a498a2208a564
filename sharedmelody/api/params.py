"""Parsing helpers for raw path and query parameters.

Parameters are accepted as strings and parsed here so malformed values
produce the ``400`` envelope with a specific message instead of FastAPI's
generic validation payload.
"""

from __future__ import annotations

import re

from sharedmelody.db.models import INTEGER_KEY_MAX
from sharedmelody.errors import validation_error

# Plain ASCII decimal only: no sign prefix "+", no "_" separators.
_INTEGER_PATTERN = re.compile(r"-?[0-9]+")


def _strict_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    text = raw.strip()
    if not text.isascii() or _INTEGER_PATTERN.fullmatch(text) is None:
        return None
    return int(text)


def parse_song_id(raw: str) -> int:
    """Parse a path segment into a positive song id that fits the key column."""

    song_id = _strict_int(raw)
    if song_id is None or not 1 <= song_id <= INTEGER_KEY_MAX:
        raise validation_error("ID de canción inválido")
    return song_id


def parse_int_query(raw: str | None, *, name: str, default: int) -> int:
    """Parse an optional integer query parameter, falling back to ``default``."""

    if raw is None or not raw.strip():
        return default
    value = _strict_int(raw)
    if value is None:
        raise validation_error(f"El parámetro {name} debe ser un número entero")
    if abs(value) > INTEGER_KEY_MAX:
        raise validation_error(f"El parámetro {name} está fuera de rango")
    return value
