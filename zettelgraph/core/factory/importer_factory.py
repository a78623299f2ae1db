"""
Factory for creating external content sources.
"""

from zettelgraph.config import ImportConfig
from zettelgraph.core.importers.base import HighlightSource, VideoTranscriptSource, WebPageSource
from zettelgraph.core.importers.readwise import ReadwiseExportSource
from zettelgraph.core.importers.web import HttpWebPageSource
from zettelgraph.core.importers.youtube import YouTubeTranscriptFetcher
from zettelgraph.utils.exceptions import ConfigurationError


class ImporterFactory:
    """Factory for creating web, video and highlight sources from configuration."""

    @staticmethod
    def create_web(config: ImportConfig) -> WebPageSource:
        return HttpWebPageSource(
            timeout=config.timeout,
            user_agent=config.user_agent,
            max_text_chars=config.max_text_chars,
        )

    @staticmethod
    def create_video(config: ImportConfig) -> VideoTranscriptSource:
        return YouTubeTranscriptFetcher(timeout=config.timeout)

    @staticmethod
    def create_highlights(config: ImportConfig) -> HighlightSource:
        """
        Raises:
            ConfigurationError: If no Readwise token is configured
        """
        if not config.readwise_token:
            raise ConfigurationError("Readwise not configured")
        return ReadwiseExportSource(
            token=config.readwise_token,
            base_url=config.readwise_base_url,
            timeout=config.timeout,
        )
