"""
OpenAI LLM provider using official SDK.
"""

from openai import AsyncOpenAI
from pydantic import BaseModel

from zettelgraph.core.llm.base import LLMProvider, build_messages
from zettelgraph.utils.exceptions import LLMError, ValidationError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


class OpenAILLM(LLMProvider):
    """
    OpenAI LLM provider for text generation.

    Uses native structured outputs (parse API) when a response model is given.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        timeout: float = 120.0,
    ):
        """
        Initialize OpenAI LLM provider.

        Args:
            api_key: OpenAI API key
            model: Model name (e.g., "gpt-4o", "gpt-4o-mini")
            base_url: Optional custom base URL
            timeout: Request timeout in seconds
        """
        self.model = model
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    async def complete(
        self,
        prompt: str,
        system: str | None = None,
        response_format: type[BaseModel] | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.0,
    ) -> BaseModel | str:
        """
        Generate completion using OpenAI.

        Raises:
            ValidationError: If prompt is empty
            LLMError: If the API call fails or returns nothing usable
        """
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt cannot be empty")

        params = {
            "model": self.model,
            "messages": build_messages(prompt, system),
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        try:
            if response_format:
                response = await self.client.chat.completions.parse(
                    **params, response_format=response_format
                )
                parsed = response.choices[0].message.parsed
                if not parsed:
                    raise LLMError("OpenAI returned empty parsed response")

                return parsed

            response = await self.client.chat.completions.create(**params)
            content = response.choices[0].message.content
            if not content:
                raise LLMError("OpenAI returned empty content")

            return content
        except LLMError:
            raise
        except Exception as e:
            logger.error(
                f"OpenAI API error: {e}",
                extra={"model": self.model, "error": str(e), "error_type": type(e).__name__},
            )
            raise LLMError(f"OpenAI API error: {e}") from e

    async def close(self) -> None:
        """Close OpenAI client."""
        await self.client.close()
