"""Structured output of concept extraction."""

from pydantic import BaseModel, Field


class Concept(BaseModel):
    """One atomic idea extracted from a transcript, destined to become a note."""

    title: str = Field(..., description="A short title for this atomic concept (3-7 words)")
    content: str = Field(..., description="The atomic note content, one clear idea (1-3 sentences)")
    suggested_links: list[str] = Field(
        default_factory=list,
        description="Titles of related concepts or existing notes to link to",
    )
    tags: list[str] = Field(default_factory=list, description="1-3 relevant tags")


class ConceptExtraction(BaseModel):
    """Concepts extracted from one transcript."""

    concepts: list[Concept] = Field(default_factory=list)
    summary: str = Field(default="", description="One sentence summary of the transcript")
