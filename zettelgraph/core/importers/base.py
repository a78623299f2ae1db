"""
Abstract base classes for external content sources.

Each source fetches raw material and composes it into an ImportedDocument;
turning documents into notes is left to the import service.
"""

from abc import ABC, abstractmethod

from zettelgraph.models.imported import ImportedDocument


class WebPageSource(ABC):
    """Fetches a web page as readable text."""

    @abstractmethod
    async def fetch(self, url: str) -> ImportedDocument:
        """
        Fetch a page and extract its title and main text.

        Args:
            url: Page URL (http or https)

        Returns:
            Document with content `# {title}\\n\\n{body}\\n\\n---\\nSource: {url}`

        Raises:
            ValidationError: If the URL is not a fetchable web address
            ImportSourceError: If the request fails or the page has no text
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass


class VideoTranscriptSource(ABC):
    """Fetches the transcript and metadata of a video."""

    @abstractmethod
    async def fetch(self, url: str) -> ImportedDocument:
        """
        Fetch a video transcript.

        Args:
            url: Video URL or bare video ID

        Raises:
            ValidationError: If no video ID can be read from the URL, or the
                video has no transcript
            ImportSourceError: If the transcript service fails
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass


class HighlightSource(ABC):
    """Exports reading highlights grouped by book or article."""

    @abstractmethod
    async def export(self, updated_after: str | None = None) -> list[ImportedDocument]:
        """
        Export every book with its highlights.

        Args:
            updated_after: Only books updated after this ISO timestamp

        Returns:
            One document per book, with the highlight count in metadata

        Raises:
            ImportSourceError: If the export API fails
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass
