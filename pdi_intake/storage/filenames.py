"""Filename normalization for object storage keys."""

import re
import unicodedata

_DISALLOWED = re.compile(r"[^A-Za-z0-9._-]")
_UNDERSCORE_RUN = re.compile(r"_+")


def sanitize(name: str) -> str:
    """Turn a user-supplied filename into a storage-safe token.

    Accents are removed (NFD decomposition without combining marks), every character
    outside ``[A-Za-z0-9._-]`` becomes ``_``, runs of ``_`` collapse into one and
    leading/trailing ``_`` are trimmed.

    Args:
        name: Original filename as shown to the user

    Returns:
        Sanitized filename, possibly empty
    """
    decomposed = unicodedata.normalize("NFD", name or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    sanitized = _DISALLOWED.sub("_", stripped)
    sanitized = _UNDERSCORE_RUN.sub("_", sanitized)
    return sanitized.strip("_")
