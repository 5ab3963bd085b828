"""
Token Counter
=============
Counts tokens with a single reference encoding shared by the whole process.
"""

import math
import threading
from functools import lru_cache

import structlog
import tiktoken

from cost_estimator.config import settings

logger = structlog.get_logger()


def estimate_tokens(text: str) -> int:
    """Rough token estimate of ~4 characters per token."""
    return math.ceil(len(text) / 4)


class TokenCounter:
    """
    Token counter backed by one tiktoken encoding.

    The encoding is loaded on first use and never mutated afterwards, so a
    single instance can be shared by concurrent tasks. If it cannot be loaded
    the counter falls back to ``estimate_tokens``.
    """

    def __init__(self, encoding_name: str | None = None):
        self.encoding_name = encoding_name or settings.tokenizer_encoding
        self._encoding: tiktoken.Encoding | None = None
        self._load_failed = False
        self._lock = threading.Lock()

    def _get_encoding(self) -> tiktoken.Encoding | None:
        if self._encoding is not None or self._load_failed:
            return self._encoding

        with self._lock:
            if self._encoding is None and not self._load_failed:
                try:
                    self._encoding = tiktoken.get_encoding(self.encoding_name)
                    logger.info("Loaded token encoding", encoding=self.encoding_name)
                except Exception as e:
                    self._load_failed = True
                    logger.warning(
                        "Token encoding unavailable, using character estimate",
                        encoding=self.encoding_name,
                        error=str(e),
                    )
        return self._encoding

    @property
    def uses_fallback(self) -> bool:
        return self._get_encoding() is None

    def count(self, text: str) -> int:
        """Return the number of tokens in ``text``; blank text is 0."""
        if not text or not text.strip():
            return 0

        encoding = self._get_encoding()
        if encoding is None:
            return estimate_tokens(text)
        return len(encoding.encode(text, disallowed_special=()))


@lru_cache
def get_token_counter() -> TokenCounter:
    """Get the process-wide token counter."""
    return TokenCounter()


def count_tokens(text: str) -> int:
    """Count tokens with the shared counter."""
    return get_token_counter().count(text)
