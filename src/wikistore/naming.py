"""Page name normalization and HTML sanitizing helpers."""

import logging
import re
from typing import Callable

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

Sanitizer = Callable[[str], str]

# Elements whose content is dropped along with the tag itself
UNSAFE_ELEMENTS = ["script", "style", "iframe", "object", "embed", "head", "title"]
MAX_SANITIZE_PASSES = 3

_KEBAB_PATTERN = re.compile(
    r"[A-Z]{2,}(?=[A-Z][a-z]+[0-9]*|\b)|[A-Z]?[a-z]+[0-9]*|[A-Z]|[0-9]+"
)


def sanitize_html(text: str) -> str:
    """Strip markup from a string, keeping only its text.

    Unsafe elements such as ``<script>`` are removed together with their
    content. Plain text passes through unchanged.

    Args:
        text: Possibly untrusted string

    Returns:
        The text content with every tag removed
    """
    if not text:
        return ""

    cleaned = text
    # Entity-encoded markup decodes into new tags, so repeat until stable
    for _ in range(MAX_SANITIZE_PASSES):
        if "<" not in cleaned and "&" not in cleaned:
            break
        soup = BeautifulSoup(cleaned, "html.parser")
        for element in soup(UNSAFE_ELEMENTS):
            element.decompose()
        text_only = soup.get_text()
        if text_only == cleaned:
            break
        cleaned = text_only

    if cleaned != text:
        logger.debug(f"Stripped markup: {text!r} -> {cleaned!r}")
    return cleaned


def normalize_page_name(name: str, sanitizer: Sanitizer = sanitize_html) -> str:
    """Return the canonical stored form of a page name.

    Trims whitespace, replaces spaces with hyphens, lowercases and finally
    passes the result through ``sanitizer``. Entities are decoded by the
    sanitizer after that, so ``"a&#32;b"`` keeps its space and ``"&#65;bc"``
    its capital letter. Name uniqueness is enforced case-insensitively.
    """
    proper_name = name.strip().replace(" ", "-").lower()
    return sanitizer(proper_name)


def to_kebab_case(title: str) -> str:
    """Split a free-form title into lowercase words joined by hyphens.

    Examples:
        "Team Notes" -> "team-notes"
        "HTMLParser2 guide" -> "html-parser2-guide"
    """
    return "-".join(_KEBAB_PATTERN.findall(title)).lower()


def kebab_to_title(name: str) -> str:
    """Display form of a page name: ``team-notes`` -> ``Team Notes``."""
    return name.replace("-", " ").title()


def names_match(left: str, right: str) -> bool:
    """Case-insensitive page name comparison."""
    return left.lower() == right.lower()
