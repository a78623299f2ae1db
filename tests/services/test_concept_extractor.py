"""
Tests for ConceptExtractor.
"""

import pytest

from zettelgraph.config import IngestionConfig, TokenizerConfig
from zettelgraph.core.tokenizer.tokenizer import Tokenizer
from zettelgraph.models.concept import ConceptExtraction
from zettelgraph.services.concept_extractor import SYSTEM_PROMPT, ConceptExtractor
from zettelgraph.utils.exceptions import ExtractionError, LLMError


@pytest.fixture
def tokenizer():
    return Tokenizer(TokenizerConfig(provider="approximate"))


@pytest.fixture
def extractor(llm, tokenizer):
    return ConceptExtractor(llm, tokenizer=tokenizer)


@pytest.mark.unit
class TestConceptExtractor:
    async def test_returns_extraction(self, llm, extractor):
        extraction = await extractor.extract("I started composting.", [])

        assert isinstance(extraction, ConceptExtraction)
        assert extraction.concepts[0].title == "Composting kitchen scraps"
        assert llm.systems == [SYSTEM_PROMPT]

    async def test_prompt_contains_transcript_and_excerpts(self, llm, extractor):
        await extractor.extract("Worms eat coffee grounds.", ["# Soil\n\nHealthy soil.", "# Bins"])

        prompt = llm.prompts[0]
        assert '"Worms eat coffee grounds."' in prompt
        assert "1. # Soil" in prompt
        assert "2. # Bins" in prompt

    async def test_no_existing_notes(self, llm, extractor):
        await extractor.extract("First note ever.", [])

        assert "None yet" in llm.prompts[0]

    async def test_excerpts_limited(self, llm, tokenizer):
        config = IngestionConfig(context_note_limit=2, context_excerpt_chars=5)
        extractor = ConceptExtractor(llm, tokenizer=tokenizer, config=config)

        await extractor.extract("text", ["abcdefghij", "klmnopqrst", "uvwxyz"])

        prompt = llm.prompts[0]
        assert "1. abcde\n2. klmno" in prompt
        assert "uvwxyz" not in prompt

    async def test_long_transcript_truncated(self, llm, tokenizer):
        extractor = ConceptExtractor(
            llm, tokenizer=tokenizer, config=IngestionConfig(max_transcript_tokens=10)
        )

        await extractor.extract("x" * 400, [])

        assert "x" * 40 in llm.prompts[0]
        assert "x" * 41 not in llm.prompts[0]

    async def test_empty_transcript(self, llm, extractor):
        with pytest.raises(ExtractionError, match="No transcription"):
            await extractor.extract("   ", [])
        assert llm.prompts == []

    async def test_llm_failure_wrapped(self, llm, extractor):
        llm.error = LLMError("model overloaded")

        with pytest.raises(ExtractionError, match="model overloaded"):
            await extractor.extract("Something", [])
