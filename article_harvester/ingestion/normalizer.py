"""
URL Normalizer Module
=====================

Pure helpers for canonicalizing hrefs and deriving taxonomy names and
slugs from URL segments.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from urllib.parse import unquote, urlsplit, urlunsplit

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")
_WORD_START = re.compile(r"\b\w")


def normalize_url(url: str) -> str:
    """
    Canonicalize a URL by dropping its fragment and query string.

    Scheme and host are lowercased and an empty path becomes ``/``.
    Input that is not an absolute URL is returned unchanged.

    Args:
        url: URL to normalize

    Returns:
        The canonical URL
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return url

    if not parts.scheme or not parts.netloc:
        return url

    return urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), parts.path or "/", "", "")
    )


def is_file_link(href: str, extensions: Iterable[str]) -> bool:
    """Check if an href points at a binary resource."""
    lowered = href.lower()
    return any(lowered.endswith(ext.lower()) for ext in extensions)


def is_same_origin(url: str, origin: str) -> bool:
    """Check if ``url`` shares scheme and host with ``origin``."""
    try:
        target = urlsplit(url)
        base = urlsplit(origin)
    except ValueError:
        return False
    return (
        target.scheme.lower() == base.scheme.lower()
        and target.netloc.lower() == base.netloc.lower()
    )


def slugify(name: str) -> str:
    """
    Build a URL-friendly slug from a display name.

    Examples:
        "Node Based Design" -> "node-based-design"
        "D&D 5th Edition" -> "d-d-5th-edition"
    """
    return _NON_SLUG_CHARS.sub("-", name.lower()).strip("-")


def name_from_slug(slug: str) -> str:
    """
    Derive a human-readable name from a URL slug.

    Dashes become spaces and the first character of every word is
    upper-cased; the rest of each word is left as-is.

    Examples:
        "node-based-design" -> "Node Based Design"
        "rpg" -> "Rpg"
    """
    name = unquote(slug).replace("-", " ")
    return _WORD_START.sub(lambda m: m.group(0).upper(), name)
