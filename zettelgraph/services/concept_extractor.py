"""
Concept Extractor - splits a transcript into atomic notes with an LLM.
"""

import time

from zettelgraph.config import IngestionConfig
from zettelgraph.core.llm.base import LLMProvider
from zettelgraph.core.tokenizer.tokenizer import Tokenizer
from zettelgraph.models.concept import ConceptExtraction
from zettelgraph.utils.exceptions import ExtractionError, LLMError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a Zettelkasten assistant helping to build a personal knowledge base. "
    "You turn spoken notes into small, self-contained atomic notes."
)


class ConceptExtractor:
    """
    Extracts atomic concepts from a voice transcript.

    Existing notes are passed as short excerpts so the model can suggest
    links to them by title.
    """

    def __init__(
        self,
        llm: LLMProvider,
        tokenizer: Tokenizer | None = None,
        config: IngestionConfig | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.0,
    ):
        """
        Initialize concept extractor.

        Args:
            llm: LLM provider with structured output support
            tokenizer: Token counter used to cap transcript length
            config: Ingestion settings (excerpt limits, transcript token budget)
            max_tokens: Completion token limit
            temperature: Sampling temperature
        """
        self.llm = llm
        self.tokenizer = tokenizer or Tokenizer()
        self.config = config or IngestionConfig()
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def extract(self, transcript: str, excerpts: list[str]) -> ConceptExtraction:
        """
        Extract concepts from a transcript.

        Args:
            transcript: Voice note transcript
            excerpts: Content of existing notes, most relevant first

        Returns:
            Concepts in the order they should become notes, plus a summary

        Raises:
            ExtractionError: If the transcript is empty or the LLM call fails
        """
        if not transcript or not transcript.strip():
            raise ExtractionError("No transcription provided")

        budget = self.config.max_transcript_tokens
        truncated = self.tokenizer.truncate(transcript, budget)
        if len(truncated) < len(transcript):
            logger.warning(
                "Transcript truncated for extraction",
                extra={"max_tokens": budget, "original_chars": len(transcript)},
            )

        prompt = self._build_extraction_prompt(truncated, excerpts)

        start_time = time.time()
        try:
            extraction = await self.llm.complete(
                prompt,
                system=SYSTEM_PROMPT,
                response_format=ConceptExtraction,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except LLMError as e:
            raise ExtractionError(f"Concept extraction failed: {e.message}") from e

        elapsed = (time.time() - start_time) * 1000
        logger.info(
            f"Extracted {len(extraction.concepts)} concept(s) in {elapsed:.0f}ms",
            extra={"concepts": len(extraction.concepts), "elapsed_ms": round(elapsed)},
        )
        return extraction

    def _build_extraction_prompt(self, transcript: str, excerpts: list[str]) -> str:
        """
        Build the concept extraction prompt.

        Args:
            transcript: (Possibly truncated) transcript
            excerpts: Existing note contents

        Returns:
            LLM prompt
        """
        return f"""
Read the voice note transcript below and break it into atomic concepts.

## Transcript
"{transcript}"

## Existing Notes (for context and linking)
{self._format_excerpts(excerpts)}

## Task

1. Each concept is ONE clear idea that makes sense on its own, without the recording.
2. Keep each concept short but complete: 1-3 sentences.
3. Give each concept a title of 3-7 words.
4. In suggested_links, list titles worth linking to:
   - other concepts you are creating (use their titles)
   - existing notes that are relevant (use part of their content as the link text)
5. Add 1-3 tags per concept.
6. Return 1-5 concepts depending on how dense the content is. Do not pad simple notes.
7. Write a one sentence summary of the whole transcript.

Capture the speaker's own ideas and insights, not commentary about the recording itself.
"""

    def _format_excerpts(self, excerpts: list[str]) -> str:
        limit = self.config.context_note_limit
        length = self.config.context_excerpt_chars

        lines = [
            f"{i}. {excerpt[:length]}" for i, excerpt in enumerate(excerpts[:limit], start=1)
        ]
        return "\n".join(lines) if lines else "None yet"
