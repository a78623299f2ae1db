"""
YouTube transcript source using youtube-transcript-api and the oEmbed endpoint.
"""

import asyncio
import re

import httpx
from youtube_transcript_api import (
    CouldNotRetrieveTranscript,
    NoTranscriptFound,
    TranscriptsDisabled,
    YouTubeTranscriptApi,
)

from zettelgraph.core.importers.base import VideoTranscriptSource
from zettelgraph.models.imported import ImportedDocument
from zettelgraph.models.node import SourceKind
from zettelgraph.utils.exceptions import ImportSourceError, ValidationError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)

OEMBED_URL = "https://www.youtube.com/oembed"

_VIDEO_ID_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?(?:.*&)?v=|youtu\.be/|youtube\.com/(?:embed|shorts)/)([\w-]{11})"),
    re.compile(r"^([\w-]{11})$"),
)


def extract_video_id(url: str) -> str | None:
    """Video ID from a watch, short, embed or youtu.be URL, or a bare ID."""
    url = (url or "").strip()
    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def compose_video_note(title: str, author: str, url: str, transcript: str) -> str:
    return (
        f"# {title}\n\n**Channel**: {author}\n**Source**: {url}\n\n"
        f"## Transcript\n\n{transcript}"
    )


class YouTubeTranscriptFetcher(VideoTranscriptSource):
    """
    Fetches captions through youtube-transcript-api.

    The transcript library is synchronous and runs in a worker thread.
    Title and channel come from oEmbed, which needs no API key; when it
    fails the note falls back to a generic title.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        languages: tuple[str, ...] = ("en",),
        transcript_api: YouTubeTranscriptApi | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize YouTube transcript fetcher.

        Args:
            timeout: oEmbed request timeout in seconds
            languages: Caption languages in order of preference
            transcript_api: Optional preconfigured transcript client
            client: Optional preconfigured HTTP client; closed by close()
        """
        self.languages = list(languages)
        self.transcript_api = transcript_api or YouTubeTranscriptApi()
        self.client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def fetch(self, url: str) -> ImportedDocument:
        video_id = extract_video_id(url)
        if not video_id:
            raise ValidationError("Invalid YouTube URL", context={"url": url})

        transcript = await self._fetch_transcript(video_id)
        metadata = await self._fetch_metadata(video_id)

        title = metadata.get("title") or f"YouTube Video {video_id}"
        author = metadata.get("author_name") or "Unknown"
        source_url = watch_url(video_id)

        logger.info(
            "Fetched YouTube transcript",
            extra={"video_id": video_id, "title": title, "length": len(transcript)},
        )
        return ImportedDocument(
            title=title,
            content=compose_video_note(title, author, source_url, transcript),
            source_kind=SourceKind.YOUTUBE,
            source_url=source_url,
            metadata={
                "video_id": video_id,
                "author": author,
                "transcript_length": len(transcript),
            },
        )

    async def _fetch_transcript(self, video_id: str) -> str:
        try:
            fetched = await asyncio.to_thread(
                self.transcript_api.fetch, video_id, languages=self.languages
            )
        except (TranscriptsDisabled, NoTranscriptFound) as e:
            logger.warning(
                "No transcript available", extra={"video_id": video_id, "error_type": type(e).__name__}
            )
            raise ValidationError(
                "Transcript not available for this video", context={"video_id": video_id}
            ) from e
        except CouldNotRetrieveTranscript as e:
            logger.error(
                f"Transcript retrieval failed: {e}",
                extra={"video_id": video_id, "error_type": type(e).__name__},
            )
            raise ImportSourceError(
                f"Could not retrieve transcript for {video_id}", context={"video_id": video_id}
            ) from e
        except Exception as e:
            logger.error(
                f"YouTube transcript error: {e}",
                extra={"video_id": video_id, "error": str(e), "error_type": type(e).__name__},
            )
            raise ImportSourceError(f"YouTube transcript error: {e}") from e

        text = " ".join(snippet.text for snippet in fetched)
        text = re.sub(r"\s+", " ", text).strip()
        if not text:
            raise ValidationError(
                "Transcript not available for this video", context={"video_id": video_id}
            )
        return text

    async def _fetch_metadata(self, video_id: str) -> dict:
        try:
            response = await self.client.get(
                OEMBED_URL, params={"url": watch_url(video_id), "format": "json"}
            )
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                f"oEmbed lookup failed, using defaults: {e}",
                extra={"video_id": video_id, "error_type": type(e).__name__},
            )
            return {}

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
