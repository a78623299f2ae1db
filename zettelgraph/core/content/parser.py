"""
Content parsing for node bodies.

Node content arrives in two encodings: plain text with `[[Title]]`
references, and editor HTML where references are spans carrying a
`data-title` attribute. Content is parsed once into a ParsedContent
structure; titles and references are read off that structure.
"""

import re
from functools import lru_cache
from html import escape, unescape
from html.parser import HTMLParser

from pydantic import BaseModel, ConfigDict

from zettelgraph.core.content.renderer import ReferenceRenderer, WikiLinkSpanRenderer

UNTITLED = "Untitled"
TITLE_ATTRIBUTE = "data-title"

_DELIMITED_REFERENCE = re.compile(r"\[\[([^\]]+)\]\]")
_HEADING_MARKER = re.compile(r"^#{1,6}\s+")
_TASK_ITEM = re.compile(r"^- \[([ xX])\] (.*)$")
_ORDERED_ITEM = re.compile(r"^\d+\. (.*)$")

# Tags that start a new line of text
_BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
        "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6",
        "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section",
        "table", "td", "th", "tr", "ul",
    }
)  # fmt: skip


class ParsedContent(BaseModel):
    """Canonical structure of a node body."""

    model_config = ConfigDict(frozen=True)

    lines: tuple[str, ...] = ()
    delimited_references: tuple[str, ...] = ()
    attribute_references: tuple[str, ...] = ()

    @property
    def title(self) -> str:
        """First line with any heading marker removed; may be empty."""
        if not self.lines:
            return ""
        first = self.lines[0].strip()
        return _HEADING_MARKER.sub("", first, count=1).strip()

    @property
    def referenced_titles(self) -> list[str]:
        """Normalized references: delimited ones first, then attribute ones."""
        seen: set[str] = set()
        titles: list[str] = []
        for raw in (*self.delimited_references, *self.attribute_references):
            normalized = normalize_title(raw)
            if normalized and normalized not in seen:
                seen.add(normalized)
                titles.append(normalized)
        return titles


class _ContentTreeBuilder(HTMLParser):
    """
    Walks markup and plain text alike, collecting lines and attribute references.

    Delimited references are matched on the raw content so that `<`, `>` and
    comments in plain text cannot hide them.
    """

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.lines: list[str] = []
        self.attributes: list[str] = []
        self._current: list[str] = []

    def handle_starttag(self, tag, attrs):
        if tag in _BLOCK_TAGS:
            self._break()
        for name, value in attrs:
            if name == TITLE_ATTRIBUTE and value:
                self.attributes.append(value)

    def handle_endtag(self, tag):
        if tag in _BLOCK_TAGS:
            self._break()

    def handle_data(self, data):
        first, *rest = data.split("\n")
        self._current.append(first)
        for part in rest:
            self._end_line()
            self._current.append(part)

    def _break(self) -> None:
        # Block boundaries only emit lines that carry text
        if "".join(self._current).strip():
            self._end_line()
        else:
            self._current = []

    def _end_line(self) -> None:
        self.lines.append("".join(self._current))
        self._current = []

    def build(self, content: str) -> ParsedContent:
        self.feed(content)
        self.close()
        if self._current:
            self._end_line()
        return ParsedContent(
            lines=tuple(self.lines),
            delimited_references=tuple(
                unescape(match) for match in _DELIMITED_REFERENCE.findall(content)
            ),
            attribute_references=tuple(self.attributes),
        )


def normalize_title(title: str) -> str:
    """Normalize a title for comparison."""
    return title.strip().lower()


@lru_cache(maxsize=2048)
def parse_content(content: str) -> ParsedContent:
    """Parse raw node content (plain text or editor HTML) into its canonical structure."""
    if not content:
        return ParsedContent()
    return _ContentTreeBuilder().build(content)


def extract_title(content: str) -> str:
    """
    Extract the display title of a node.

    Markup is stripped, the first line is taken, a leading heading marker
    is removed and the result trimmed. Never returns an empty string.
    """
    return parse_content(content or "").title or UNTITLED


def extract_referenced_titles(content: str) -> list[str]:
    """
    Extract the lower-cased titles a node references, in first-seen order.

    Both `[[Title]]` references and `data-title` attributes are recognised.
    """
    return parse_content(content or "").referenced_titles


class ContentParser:
    """
    Content parsing with an injectable reference renderer.

    Title and reference extraction are pure; `to_editor_html` upgrades
    legacy plain-text content to editor markup at read time.
    """

    def __init__(self, renderer: ReferenceRenderer | None = None):
        self.renderer = renderer or WikiLinkSpanRenderer()

    def parse(self, content: str) -> ParsedContent:
        return parse_content(content or "")

    def extract_title(self, content: str) -> str:
        return extract_title(content)

    def extract_raw_title(self, content: str) -> str:
        """Title without the "Untitled" fallback."""
        return self.parse(content).title

    def extract_referenced_titles(self, content: str) -> list[str]:
        return extract_referenced_titles(content)

    def references(self, content: str, title: str) -> bool:
        """Check whether content references `title` (case-insensitive)."""
        return normalize_title(title) in self.extract_referenced_titles(content)

    def to_editor_html(self, content: str) -> str:
        """
        Convert legacy plain-text content to editor HTML.

        Handles `#`/`##`/`###` headings, task items, bullet and numbered
        lists, paragraphs and wiki-links. Content that already contains
        markup is returned unchanged.

        Args:
            content: Raw node content

        Returns:
            HTML suitable for the rich editor
        """
        if "<" in content:
            return content

        output: list[str] = []
        open_list: str | None = None  # "ul", "ol" or "task"

        def close_list() -> None:
            nonlocal open_list
            if open_list:
                output.append("</ol>" if open_list == "ol" else "</ul>")
                open_list = None

        def ensure_list(kind: str) -> None:
            nonlocal open_list
            if open_list == kind:
                return
            close_list()
            output.append(
                {"ul": "<ul>", "ol": "<ol>", "task": '<ul data-type="taskList">'}[kind]
            )
            open_list = kind

        for line in content.split("\n"):
            heading = _heading_level(line)
            if heading:
                close_list()
                output.append(f"<h{heading}>{self._inline(line[heading + 1:])}</h{heading}>")
                continue

            task = _TASK_ITEM.match(line)
            if task:
                ensure_list("task")
                checked = task.group(1).lower() == "x"
                output.append(
                    f'<li data-type="taskItem" data-checked="{str(checked).lower()}">'
                    f'<label><input type="checkbox"{" checked" if checked else ""}>'
                    f"<span></span></label><div><p>{self._inline(task.group(2))}</p></div></li>"
                )
                continue

            if line.startswith("- "):
                ensure_list("ul")
                output.append(f"<li><p>{self._inline(line[2:])}</p></li>")
                continue

            ordered = _ORDERED_ITEM.match(line)
            if ordered:
                ensure_list("ol")
                output.append(f"<li><p>{self._inline(ordered.group(1))}</p></li>")
                continue

            close_list()
            if line.strip():
                output.append(f"<p>{self._inline(line)}</p>")
            else:
                output.append("<p></p>")

        close_list()
        return "".join(output)

    def _inline(self, text: str) -> str:
        """Escape text and render its delimited references."""
        parts: list[str] = []
        cursor = 0
        for match in _DELIMITED_REFERENCE.finditer(text):
            parts.append(escape(text[cursor : match.start()], quote=False))
            parts.append(self.renderer.render(match.group(1)))
            cursor = match.end()
        parts.append(escape(text[cursor:], quote=False))
        return "".join(parts)


def _heading_level(line: str) -> int:
    for level in (3, 2, 1):
        if line.startswith("#" * level + " "):
            return level
    return 0
