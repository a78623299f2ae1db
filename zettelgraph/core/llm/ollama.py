"""
Ollama LLM provider using native ollama-python SDK.
"""

import ollama
from pydantic import BaseModel

from zettelgraph.core.llm.base import LLMProvider, build_messages
from zettelgraph.utils.exceptions import LLMError, ValidationError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


class OllamaLLM(LLMProvider):
    """
    Ollama LLM provider for text generation.

    Structured outputs pass the response model's JSON schema as the chat
    format, so the server constrains decoding to it.
    """

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "llama3.1:8b",
        timeout: float = 120.0,
    ):
        """
        Initialize Ollama LLM provider.

        Args:
            host: Ollama server URL
            model: Model name for text generation (e.g., "llama3.1", "mistral")
            timeout: Request timeout in seconds
        """
        self.host = host
        self.model = model
        self.timeout = timeout

        self.client = ollama.AsyncClient(host=host, timeout=timeout)

    async def complete(
        self,
        prompt: str,
        system: str | None = None,
        response_format: type[BaseModel] | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.0,
    ) -> BaseModel | str:
        """
        Generate completion using Ollama.

        Raises:
            ValidationError: If prompt is empty
            LLMError: If the call fails or the output doesn't validate
        """
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt cannot be empty")

        try:
            response = await self.client.chat(
                model=self.model,
                messages=build_messages(prompt, system),
                format=response_format.model_json_schema() if response_format else None,
                options={"temperature": temperature, "num_predict": max_tokens},
            )
        except Exception as e:
            logger.error(
                f"Ollama API error: {e}",
                extra={"model": self.model, "host": self.host, "error": str(e)},
            )
            raise LLMError(f"Ollama API error: {e}") from e

        content = response["message"]["content"]

        if not response_format:
            return content

        try:
            return response_format.model_validate_json(self._extract_json(content))
        except Exception as e:
            logger.warning(
                "Ollama structured output did not validate",
                extra={"model": self.model, "error": str(e), "raw": content[:500]},
            )
            raise LLMError(
                f"Failed to parse structured output: {e}",
                context={"expected": response_format.__name__},
            ) from e

    def _extract_json(self, content: str) -> str:
        """Strip markdown code fences the model may wrap around JSON."""
        content = content.strip()

        if "```json" in content:
            content = content.split("```json")[1].split("```")[0].strip()
        elif "```" in content:
            content = content.split("```")[1].split("```")[0].strip()

        return content

    async def close(self) -> None:
        """Nothing to release; the SDK manages its own connections."""
        pass
