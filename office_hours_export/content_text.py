"""
Turn raw Canvas markup (page bodies, bios, syllabus files) into plain
line-oriented text for the office hours extractor.

Canvas page bodies are HTML fragments written in the rich content editor:
office hours usually sit in <p> or <li> elements separated by <br>, e.g.

    <p><strong>Jane Doe (Instructor)</strong><br>Office Hours:<br>
    Monday: 2:00-3:00 in Room 101</p>

Every tag becomes a line break so the extractor can work line by line.
"""
from __future__ import annotations

import re
from typing import List
from urllib.parse import unquote, urlparse

from bs4 import BeautifulSoup  # type: ignore[import]


_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.I | re.S)
_COMMENT_RE = re.compile(r"<!--.*?-->", re.S)
_TAG_RE = re.compile(r"<[^<>]*>")

# Only whitespace entities are decoded; anything else stays as written so a
# second pass cannot turn text into new markup.
_WHITESPACE_ENTITIES = (
    "&nbsp;",
    "&#160;",
    "&#xa0;",
    "&#xA0;",
    "&ensp;",
    "&emsp;",
    "&thinsp;",
)
_HSPACE_RE = re.compile(r"[ \t\f\v\u00a0\u2002\u2003\u2009\u200b]+")

_PAGE_HREF_RE = re.compile(r"/pages/([^/?#]+)")


def normalize_lines(text: str | None) -> List[str]:
    """
    Strip markup and return the non-empty, trimmed lines in order.

    Idempotent: normalize_lines("\\n".join(normalize_lines(x))) == normalize_lines(x).
    """
    if not text:
        return []
    text = _SCRIPT_STYLE_RE.sub("\n", text)
    text = _COMMENT_RE.sub("\n", text)
    # Repeat until stable: "<<b>>" only loses its outer pair on the second pass.
    while True:
        stripped = _TAG_RE.sub("\n", text)
        if stripped == text:
            break
        text = stripped
    for entity in _WHITESPACE_ENTITIES:
        text = text.replace(entity, " ")
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    lines: List[str] = []
    for raw in text.split("\n"):
        line = _HSPACE_RE.sub(" ", raw).strip()
        if line:
            lines.append(line)
    return lines


def normalize_text(text: str | None) -> str:
    """Same as normalize_lines, joined with newlines."""
    return "\n".join(normalize_lines(text))


def find_page_links(html: str | None) -> List[str]:
    """
    Return the page slugs of links to course pages ('.../pages/<slug>'),
    first-seen order, without duplicates.
    """
    if not html:
        return []
    soup = BeautifulSoup(html, "html.parser")
    slugs: List[str] = []
    for a in soup.find_all("a", href=True):
        href = a.get("href") or ""
        m = _PAGE_HREF_RE.search(urlparse(href).path)
        if not m:
            continue
        slug = unquote(m.group(1)).strip()
        if slug and slug not in slugs:
            slugs.append(slug)
    return slugs
