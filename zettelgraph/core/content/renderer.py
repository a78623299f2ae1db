"""
Rendering strategies for wiki-link references.

A renderer turns a referenced title into editor markup. It is handed to
ContentParser at construction so different front-ends can supply their own.
"""

from abc import ABC, abstractmethod
from html import escape

WIKI_LINK_CLASS = (
    "wiki-link text-primary hover:text-primary/80 cursor-pointer font-medium "
    "underline decoration-primary/50 hover:decoration-primary"
)


class ReferenceRenderer(ABC):
    """Abstract base for wiki-link renderers."""

    @abstractmethod
    def render(self, title: str) -> str:
        """
        Render a single reference.

        Args:
            title: Referenced title exactly as written by the user

        Returns:
            Markup fragment for the reference
        """
        pass


class WikiLinkSpanRenderer(ReferenceRenderer):
    """Renders references as the span markup the rich editor reads back."""

    def __init__(self, css_class: str | None = WIKI_LINK_CLASS):
        self.css_class = css_class

    def render(self, title: str) -> str:
        safe = escape(title, quote=True)
        class_attr = f' class="{self.css_class}"' if self.css_class else ""
        return f'<span data-wiki-link="true" data-title="{safe}"{class_attr}>[[{safe}]]</span>'


class PlainReferenceRenderer(ReferenceRenderer):
    """Keeps references in their delimited plain-text form."""

    def render(self, title: str) -> str:
        return f"[[{escape(title, quote=False)}]]"
