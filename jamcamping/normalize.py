from __future__ import annotations

"""
Text normalisation helpers shared by the catalog loader and the scorer.

Public helpers:

* basic_clean(text) -> str
    Light-weight clean used when loading catalog fields.

* fold(text) -> str
    Lower-cased view used for case-insensitive containment checks.
"""

import re
import unicodedata

from bs4 import BeautifulSoup

MAX_FIELD_CHARS = 8000

_TAG_RE = re.compile(r"<[a-zA-Z/!][^>]*>")


# ---------------------------------------------------------------------------
# Low-level helpers
# ---------------------------------------------------------------------------


def _strip_html(text: str) -> str:
    if not text:
        return ""
    # Only hand real markup to the parser; "<3" and "a < b" stay as written.
    if not _TAG_RE.search(text):
        return text
    soup = BeautifulSoup(text, "html.parser")
    return soup.get_text(" ", strip=True)


def _normalise_unicode(text: str) -> str:
    text = unicodedata.normalize("NFKC", text)
    text = text.replace("‘", "'").replace("’", "'")
    text = text.replace("“", '"').replace("”", '"')
    return text


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def basic_clean(text: str | None) -> str:
    """Light-weight clean for catalog fields.

    * strips HTML
    * normalises unicode and whitespace
    * truncates excessively long inputs
    """
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)

    if len(text) > MAX_FIELD_CHARS:
        text = text[:MAX_FIELD_CHARS]

    text = _strip_html(text)
    text = _normalise_unicode(text)

    text = text.replace("\r", " ").replace("\n", " ").replace("\t", " ")
    text = re.sub(r"\s+", " ", text).strip()
    return text


def fold(text: str | None) -> str:
    """Case-folded form used on both sides of a containment check."""
    if not text:
        return ""
    return text.lower()
