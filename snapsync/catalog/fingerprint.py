"""Stable identities for discovered images.

Every function here is pure: the canonical key is the only de-duplication
handle that survives a process restart, so identical inputs must always give
identical outputs.
"""

import posixpath
import re
from urllib.parse import urlsplit

DEFAULT_NAMESPACE = "snapmatic"
DEFAULT_EXTENSION = ".jpg"
UNKNOWN_AUTHOR = "Unknown"

_UPLOADED_BY = re.compile(r"Uploaded by\s+(.+)", re.IGNORECASE)
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_\-]")


def derive_author(embed_text: str | None, fallback_handle: str | None) -> str:
    """Read the handle from an "Uploaded by <handle>" caption.

    Falls back to the message author's handle, then to ``Unknown``.
    """
    if embed_text:
        match = _UPLOADED_BY.search(embed_text)
        if match:
            handle = match.group(1).strip()
            if handle and handle != UNKNOWN_AUTHOR:
                return handle
    return fallback_handle or UNKNOWN_AUTHOR


def sanitize(handle: str) -> str:
    """Strip every character outside ``[A-Za-z0-9_-]``."""
    return _UNSAFE_CHARS.sub("", handle)


def file_extension(url: str) -> str:
    """Extension of the URL path, ignoring any query string."""
    ext = posixpath.splitext(urlsplit(url).path)[1]
    return ext or DEFAULT_EXTENSION


def staged_name(handle: str, source_id: str, ext: str) -> str:
    """Scratch file name, e.g. ``Rocco_42.jpg``."""
    return f"{sanitize(handle)}_{sanitize(source_id)}{ext}"


def derive_key(
    handle: str, source_id: str, ext: str, namespace: str = DEFAULT_NAMESPACE
) -> str:
    """Canonical storage path, e.g. ``snapmatic/Rocco/42.jpg``."""
    return f"{namespace}/{sanitize(handle)}/{sanitize(source_id)}{ext}"


def public_url(key: str, base_url: str) -> str:
    """Public URL of a published key. Never depends on upload responses."""
    return f"{base_url.rstrip('/')}/{key}"


def uploader_from_key(key: str) -> str:
    parts = key.split("/")
    return parts[1] if len(parts) >= 3 else UNKNOWN_AUTHOR
