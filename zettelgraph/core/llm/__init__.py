"""
LLM abstraction layer for text generation.

Supported providers:
- Ollama (native SDK)
- OpenAI (official SDK)
"""

from zettelgraph.core.llm.base import LLMProvider
from zettelgraph.core.llm.ollama import OllamaLLM
from zettelgraph.core.llm.openai import OpenAILLM

__all__ = [
    "LLMProvider",
    "OllamaLLM",
    "OpenAILLM",
]
