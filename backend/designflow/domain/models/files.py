"""Helpers for opaque file references (public object URIs)."""

from __future__ import annotations

from urllib.parse import unquote, urlsplit

GENERIC_FILE_LABEL = "file"


def file_label(uri: str) -> str:
    """Human readable name for a file reference.

    Falls back to :data:`GENERIC_FILE_LABEL` when the reference is not a
    parseable absolute URI.
    """
    try:
        parts = urlsplit(uri)
    except (TypeError, ValueError):
        return GENERIC_FILE_LABEL
    if not parts.scheme or not parts.netloc:
        return GENERIC_FILE_LABEL
    name = unquote(parts.path.rsplit("/", 1)[-1])
    return name or GENERIC_FILE_LABEL


def key_from_public_uri(uri: str, prefix: str) -> str | None:
    """Return the object key addressed by ``uri`` under ``prefix``, if any."""
    if not prefix.endswith("/"):
        prefix = f"{prefix}/"
    if not uri.startswith(prefix):
        return None
    key = unquote(urlsplit(uri[len(prefix):]).path)
    return key or None
