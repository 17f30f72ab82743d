"""Token estimation shared by the provider client and context assembly."""

import tiktoken

from colleague.utils.logging import get_logger

logger = get_logger(__name__)


class TokenCounter:
    """Approximate token counts for Claude prompts.

    The tiktoken encoding is loaded lazily since it may need to be downloaded on
    first use; without it the count falls back to roughly 4 characters per token.
    """

    tokenizer: tiktoken.Encoding | None = None

    def __init__(self, use_tiktoken: bool = True):
        self.use_tiktoken = use_tiktoken
        self._loaded = not use_tiktoken

    def _get_tokenizer(self) -> tiktoken.Encoding | None:
        if not self._loaded:
            self._loaded = True
            try:
                # Close approximation for Claude
                self.tokenizer = tiktoken.encoding_for_model("gpt-4")
            except Exception as e:
                logger.warning(f"tiktoken unavailable, using character estimate: {e}")
                self.tokenizer = None
        return self.tokenizer

    def count(self, text: str) -> int:
        """Estimate token count for a piece of text."""
        tokenizer = self._get_tokenizer()
        try:
            return len(tokenizer.encode(text)) if tokenizer else len(text) // 4
        except Exception:
            return len(text) // 4


_token_counter: TokenCounter | None = None


def get_token_counter() -> TokenCounter:
    """Get or create token counter instance."""
    global _token_counter
    if _token_counter is None:
        _token_counter = TokenCounter()
    return _token_counter
