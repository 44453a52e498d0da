"""
Rich-text cleanup for HTML-valued description fields.

Descriptions arrive as editor HTML, sometimes entity-encoded or with
JavaScript string escapes left in. Cleaning keeps the text structure
(paragraphs, emphasis, line breaks) and drops images, style blocks and
containers left empty. Cleaning is idempotent.
"""
import html
import re
from typing import Any, List, Optional

from bs4 import BeautifulSoup, Comment

_LITERAL_ESCAPES = (
    ("\\u003c", "<"),
    ("\\u003e", ">"),
    ("\\u0026", "&"),
    ("\\u0027", "'"),
    ("\\r\\n", "\n"),
    ("\\n", "\n"),
)

_NOISE_TAGS = ["img", "picture", "source", "svg", "style", "script", "noscript"]

_CONTAINER_TAGS = [
    "p", "div", "span", "section", "article", "figure", "figcaption",
    "strong", "b", "em", "i", "u", "a", "blockquote",
    "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "li",
]


def decode_escapes(text: str) -> str:
    """
    Decode literal JavaScript escapes ("\\u003c", "\\n") and, for text that
    carries no markup yet, HTML entities. Text that already has tags keeps
    its entities for the HTML parser, so "&amp;lt;" stays literal text.
    """
    decoded = text
    for escape, char in _LITERAL_ESCAPES:
        decoded = decoded.replace(escape, char)
    if "<" not in decoded:
        decoded = html.unescape(decoded)
    return decoded.replace("\xa0", " ")


def plain_text(fragment: Optional[str]) -> str:
    """Visible text of an HTML fragment, whitespace-collapsed."""
    if not fragment:
        return ""
    text = BeautifulSoup(fragment, "html.parser").get_text(" ", strip=True)
    return re.sub(r"\s+", " ", text).strip()


def clean_rich_text(text: Optional[str]) -> Optional[str]:
    """
    Clean an HTML-valued field.

    Args:
        text: Raw formatted text, possibly escaped

    Returns:
        Cleaned HTML/text, or None if nothing readable remains
    """
    if not isinstance(text, str) or not text.strip():
        return None

    soup = BeautifulSoup(decode_escapes(text), "html.parser")

    for tag in soup.find_all(_NOISE_TAGS):
        tag.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    # Children come before parents in reversed document order, so a
    # container emptied by removing its children is caught in the same pass
    for tag in reversed(soup.find_all(_CONTAINER_TAGS)):
        if not tag.get_text(strip=True):
            tag.decompose()

    if not soup.get_text(strip=True):
        return None

    cleaned = soup.decode(formatter="minimal").replace("\xa0", " ")
    cleaned = re.sub(r"[ \t\r\f\v]+", " ", cleaned)
    cleaned = re.sub(r" *\n *", "\n", cleaned)
    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    return cleaned.strip() or None


def format_section(title: str, body: str) -> str:
    """Render a titled section: emphasized heading, blank line, body."""
    return f"<h3><strong>{html.escape(title.strip(), quote=False)}</strong></h3>\n\n{body}"


def build_description_from_remarks(remarks: Any) -> Optional[str]:
    """
    Build a description from a "titled remarks" collection.

    Each remark with a title and a non-empty cleaned body becomes a
    titled section; sections keep source order and are separated by
    blank lines.
    """
    if not isinstance(remarks, list):
        return None

    sections: List[str] = []
    for remark in remarks:
        if not isinstance(remark, dict):
            continue
        title = remark.get("title")
        body = remark.get("description") or remark.get("content") or remark.get("body")
        if not isinstance(title, str) or not title.strip():
            continue
        cleaned = clean_rich_text(body)
        if cleaned:
            sections.append(format_section(title, cleaned))

    return "\n\n".join(sections) if sections else None
