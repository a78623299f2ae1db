"""
External content sources.

Supported sources:
- Web pages (httpx + BeautifulSoup)
- YouTube transcripts (youtube-transcript-api + oEmbed)
- Readwise highlights (v2 export API)
"""

from zettelgraph.core.importers.base import HighlightSource, VideoTranscriptSource, WebPageSource
from zettelgraph.core.importers.readwise import ReadwiseExportSource
from zettelgraph.core.importers.web import HttpWebPageSource
from zettelgraph.core.importers.youtube import YouTubeTranscriptFetcher

__all__ = [
    "WebPageSource",
    "VideoTranscriptSource",
    "HighlightSource",
    "HttpWebPageSource",
    "YouTubeTranscriptFetcher",
    "ReadwiseExportSource",
]
