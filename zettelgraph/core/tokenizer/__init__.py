"""
Tokenizer module for token counting and prompt truncation.

Provides accurate token counting using tiktoken with fast approximation fallback.
"""

from zettelgraph.config import TokenizerConfig
from zettelgraph.core.tokenizer.tokenizer import Tokenizer

__all__ = ["Tokenizer", "TokenizerConfig"]
