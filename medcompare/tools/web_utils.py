from __future__ import annotations

import re
from urllib.parse import urljoin

from bs4 import Tag

_HTML_TAG = re.compile(r"<[^>]+>")
_UNICODE_ESCAPE = re.compile(r"\\u[\dA-Fa-f]{4}")
_LEADING_NUMBER = re.compile(r"^\s*([-+]?\d+(?:\.\d+)?)")


def clean_content(text: str, max_length: int = 500) -> str:
    """Strip markup from scraped text, collapse whitespace, trim to max length."""
    text = _HTML_TAG.sub(" ", text)
    text = text.replace("&nbsp;", " ").replace("&amp;", "&")
    text = _UNICODE_ESCAPE.sub("", text)
    text = re.sub(r"\s+", " ", text).strip()
    return text[:max_length]


def text_of(node: Tag | None, selector: str) -> str:
    """Stripped text of the first element matching ``selector`` under ``node``."""
    if node is None:
        return ""
    found = node.select_one(selector)
    return found.get_text(strip=True) if found is not None else ""


def parse_price(text: str | None) -> float | None:
    """'₹1,234.50*' -> 1234.5; anything unparseable -> None."""
    if not text:
        return None
    cleaned = re.sub(r"MRP|₹|,|\*", "", text).strip()
    try:
        return float(cleaned)
    except ValueError:
        return None


def leading_number(value: object) -> float | None:
    """Numeric prefix of a value such as '15 tablets', or None."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    match = _LEADING_NUMBER.match(str(value or ""))
    return float(match.group(1)) if match else None


def absolute_url(base: str, href: str | None) -> str | None:
    if not href:
        return None
    return urljoin(base, href)


def slugify(text: str | None) -> str:
    return re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")
