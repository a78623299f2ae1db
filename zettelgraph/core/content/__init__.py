"""
Content parsing for node bodies.

Extracts display titles and wiki-link references from plain-text and
editor-HTML content, and converts legacy plain text to editor markup.
"""

from zettelgraph.core.content.parser import (
    UNTITLED,
    ContentParser,
    ParsedContent,
    extract_referenced_titles,
    extract_title,
    normalize_title,
    parse_content,
)
from zettelgraph.core.content.renderer import (
    PlainReferenceRenderer,
    ReferenceRenderer,
    WikiLinkSpanRenderer,
)

__all__ = [
    "ContentParser",
    "ParsedContent",
    "parse_content",
    "extract_title",
    "extract_referenced_titles",
    "normalize_title",
    "UNTITLED",
    "ReferenceRenderer",
    "WikiLinkSpanRenderer",
    "PlainReferenceRenderer",
]
