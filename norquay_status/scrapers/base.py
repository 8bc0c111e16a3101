"""Shared helpers for regex scraping of resort pages."""
from __future__ import annotations

import re
from typing import Iterator, List, Optional, Pattern, Union

from bs4 import BeautifulSoup

_ROW = re.compile(r"<tr[\s\S]*?</tr>", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")
_LOOKS_LIKE_HTML = re.compile(r"<[a-zA-Z!/][^>]*>")

PatternLike = Union[str, Pattern[str]]


def create_soup(html: str) -> BeautifulSoup:
    """Create a BeautifulSoup parser from HTML content."""
    return BeautifulSoup(html, "lxml")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def page_text(html_or_text: str) -> str:
    """Flatten a page into one line of visible text.

    Plain text passes through with its whitespace collapsed; HTML has its
    scripts and styles dropped first so their contents cannot match a label.
    """
    if not html_or_text:
        return ""
    if not _LOOKS_LIKE_HTML.search(html_or_text):
        return collapse_whitespace(html_or_text)

    soup = create_soup(html_or_text)
    for node in soup(["script", "style", "noscript"]):
        node.decompose()
    root = soup.body or soup
    return collapse_whitespace(root.get_text(" "))


def iter_rows(html: str) -> Iterator[str]:
    """Yield each ``<tr>...</tr>`` fragment in document order."""
    if not html:
        return
    for match in _ROW.finditer(html):
        yield match.group(0)


def _compile(pattern: PatternLike) -> Pattern[str]:
    if isinstance(pattern, str):
        return re.compile(pattern, re.IGNORECASE)
    return pattern


def search_int(pattern: PatternLike, text: str) -> Optional[int]:
    """Return the first capture group of ``pattern`` as an int, or None."""
    if not text:
        return None
    match = _compile(pattern).search(text)
    if not match:
        return None
    return int(match.group(1))


def find_all_ints(pattern: PatternLike, text: str) -> List[int]:
    """Every first-group capture of ``pattern``, in document order."""
    if not text:
        return []
    return [int(match.group(1)) for match in _compile(pattern).finditer(text)]
