"""Canonical name keys shared by the scraper, the resolver and the map builder.

Run names on the conditions page and element ids in the trail map SVG are
written differently ("Valley of 10" vs ``valley-of-10``, curly vs straight
apostrophes). Both sides are folded into a :func:`normalize` key before they
are compared.
"""
from __future__ import annotations

import re
from typing import Optional

# Right single quotation mark, the modifier letter apostrophe that renders the
# same, and the UTF-8 mojibake of the right quote seen in copy-pasted labels.
# The left quote is not an apostrophe and is left alone.
_APOSTROPHE_VARIANTS = re.compile("â€™|[’ʼ]")
_DASHES = re.compile(r"[_-]+")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: Optional[str]) -> str:
    """Fold a run name, lift name or SVG id into a comparable key.

    >>> normalize("  Wiegele’s_Run ")
    "wiegele's run"
    """
    if not text:
        return ""
    key = str(text).lower()
    key = _APOSTROPHE_VARIANTS.sub("'", key)
    key = key.replace("\u00a0", " ")
    key = _DASHES.sub(" ", key)
    key = _WHITESPACE.sub(" ", key)
    return key.strip()


def identify(text: Optional[str]) -> str:
    """Slug form of a name, used as a candidate SVG element id."""
    return normalize(text).replace(" ", "-")


def loose_key(text: Optional[str]) -> str:
    """Apostrophe-insensitive key, only used when building the identifier map."""
    return normalize(text).replace("'", "")
