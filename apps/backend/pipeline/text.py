"""
Text helpers shared by the extractors.
"""

import re
import copy
import html as html_lib
from typing import Optional

from bs4 import BeautifulSoup

BLOCK_TAGS = [
    'p', 'div', 'li', 'ul', 'ol', 'section', 'article', 'header', 'footer',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'tr', 'table', 'blockquote', 'pre',
]


def normalize_whitespace(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\xa0", " ")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _block_text(element) -> str:
    # Work on a copy so the caller's tree is left untouched
    element = copy.copy(element)
    for br in element.find_all('br'):
        br.replace_with("\n")
    for tag in element.find_all(BLOCK_TAGS):
        tag.insert_before("\n")
        tag.insert_after("\n")
    # Adjacent blocks would otherwise leave blank lines between list items
    return re.sub(r"\n+", "\n", normalize_whitespace(element.get_text()))


def html_to_text(fragment: str) -> str:
    """
    Strip markup from an HTML fragment, keeping block breaks as newlines.

    Entity-escaped markup ("&lt;p&gt;...") is unescaped first.
    """
    if not fragment:
        return ""
    if "&lt;" in fragment and "<" not in fragment:
        fragment = html_lib.unescape(fragment)
    return _block_text(BeautifulSoup(fragment, 'html.parser'))


def element_text(element) -> str:
    """Visible text of a parsed element with normalized whitespace."""
    if element is None:
        return ""
    return _block_text(element)


def parse_count(text: Optional[str]) -> Optional[int]:
    """
    Parse a count such as "Over 200 applicants" or "1,024 applicants".

    Returns:
        The integer, or None when the text holds no digits
    """
    if not text:
        return None
    digits = re.sub(r"\D", "", text)
    if not digits:
        return None
    return int(digits)
