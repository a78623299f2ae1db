"""
Abstract base class for LLM providers.
Handles text generation with optional structured outputs.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel


class LLMProvider(ABC):
    """
    Abstract base for LLM text generation providers.

    Concept extraction relies on structured output: providers must return a
    validated instance of response_format when one is given.
    """

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system: str | None = None,
        response_format: type[BaseModel] | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.0,
    ) -> BaseModel | str:
        """
        Generate completion from prompt.

        Args:
            prompt: The user prompt
            system: Optional system instructions
            response_format: Optional Pydantic model for structured output
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature

        Returns:
            Pydantic model instance if response_format provided, else string

        Raises:
            ValidationError: If the prompt is empty
            LLMError: If the call fails or the output doesn't match response_format
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass


def build_messages(prompt: str, system: str | None) -> list[dict[str, str]]:
    """Chat messages for a prompt with optional system instructions."""
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})
    return messages
