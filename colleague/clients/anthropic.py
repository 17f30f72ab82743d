"""Anthropic API client with rate limiting and streaming tool-use support."""

import asyncio
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from anthropic import APIError, AsyncAnthropic
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from pydantic import BaseModel

from colleague.config import Settings, get_settings
from colleague.models.llm import LLMMessage, LLMToolDefinition, ProviderEvent, ToolUseBlock
from colleague.utils.logging import get_logger
from colleague.utils.tokens import TokenCounter, get_token_counter

logger = get_logger(__name__)


class CompletionProvider(Protocol):
    """Streaming completion backend used by the tool-use loop."""

    def stream_message(
        self,
        messages: list[LLMMessage],
        system_prompt: str,
        tools: list[LLMToolDefinition] | None = None,
    ) -> AsyncIterator[ProviderEvent]:
        """Stream one completion as content, tool_use, error and done events.

        Errors are reported as an error event instead of being raised.
        """
        ...


class CacheControl(BaseModel):
    """Cache control configuration for prompt caching."""

    type: Literal["ephemeral"] = "ephemeral"


class AnthropicTool(BaseModel):
    """Tool definition for Anthropic API."""

    name: str
    description: str
    input_schema: dict[str, Any]
    cache_control: CacheControl | None = None


@dataclass
class AnthropicConfig:
    """Configuration for Anthropic API client."""

    model: str = "claude-sonnet-4-5"
    max_tokens: int = 4096
    temperature: float = 0.7

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnthropicConfig":
        return cls(
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        )


class AnthropicRateLimiter:
    """Moving-window limiter for requests and tokens per minute."""

    def __init__(self, requests_per_minute: int = 50, tokens_per_minute: int = 40_000):
        """Initialize rate limiter.

        Args:
            requests_per_minute: Maximum requests per minute
            tokens_per_minute: Maximum tokens per minute
        """
        self.storage = MemoryStorage()
        self.limiter = MovingWindowRateLimiter(self.storage)

        self.request_limit = parse(f"{requests_per_minute}/minute")
        self.token_limit = parse(f"{tokens_per_minute}/minute")

    async def _wait_for_window(self, limit, identifier: str, label: str) -> None:
        window_stats = self.limiter.get_window_stats(limit, identifier)
        if window_stats:
            wait_time = max(0.0, window_stats.reset_time - time.time())
            if wait_time > 0:
                logger.warning(f"{label} rate limit exceeded, waiting {wait_time:.2f}s")
                await asyncio.sleep(wait_time)

    async def check_rate_limit(self, estimated_tokens: int, identifier: str = "anthropic") -> None:
        """Wait until the request fits within rate limits."""
        logger.debug(f"Checking rate limit for {estimated_tokens} tokens, identifier: {identifier}")

        if not self.limiter.hit(self.request_limit, identifier):
            await self._wait_for_window(self.request_limit, identifier, "Request")

        token_identifier = f"{identifier}_tokens"
        if not self.limiter.hit(self.token_limit, token_identifier, cost=max(1, estimated_tokens)):
            await self._wait_for_window(self.token_limit, token_identifier, "Token")


class AnthropicClient:
    """Anthropic Messages API client that streams text and tool calls."""

    client: AsyncAnthropic
    config: AnthropicConfig
    rate_limiter: AnthropicRateLimiter
    token_counter: TokenCounter

    def __init__(
        self,
        api_key: str | None = None,
        config: AnthropicConfig | None = None,
        rate_limiter: AnthropicRateLimiter | None = None,
        token_counter: TokenCounter | None = None,
    ):
        """Initialize Anthropic client.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY)
            config: Client configuration (defaults to application settings)
        """
        settings = get_settings()
        anthropic_api_key = api_key or settings.anthropic_api_key
        if not anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable is required")

        self.client = AsyncAnthropic(api_key=anthropic_api_key)
        self.config = config or AnthropicConfig.from_settings(settings)
        self.rate_limiter = rate_limiter or AnthropicRateLimiter()
        self.token_counter = token_counter or get_token_counter()

    def _build_tools(self, tools: list[LLMToolDefinition]) -> list[dict[str, Any]]:
        anthropic_tools = [
            AnthropicTool(name=tool.name, description=tool.description, input_schema=tool.input_schema)
            for tool in tools
        ]
        # Cache breakpoint after the last tool declaration
        anthropic_tools[-1].cache_control = CacheControl()
        return [tool.model_dump(exclude_none=True) for tool in anthropic_tools]

    def _build_request(
        self,
        messages: list[LLMMessage],
        system_prompt: str,
        tools: list[LLMToolDefinition] | None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            "system": system_prompt,
            "messages": [message.model_dump() for message in messages],
        }
        if tools:
            params["tools"] = self._build_tools(tools)
        return params

    async def stream_message(
        self,
        messages: list[LLMMessage],
        system_prompt: str,
        tools: list[LLMToolDefinition] | None = None,
    ) -> AsyncIterator[ProviderEvent]:
        """Stream a completion.

        Text deltas are yielded as they arrive. A tool call is yielded once its
        content block is complete, with the fully parsed input. The stream ends
        with a done event, or with a single error event if the request fails.
        """
        estimated_tokens = self.estimate_request_tokens(messages, system_prompt)
        await self.rate_limiter.check_rate_limit(estimated_tokens)

        params = self._build_request(messages, system_prompt, tools)
        logger.debug(
            f"Streaming message with {len(messages)} messages, {len(tools) if tools else 0} tools, "
            f"model: {params['model']}"
        )

        try:
            async with self.client.messages.stream(**params) as stream:
                async for event in stream:
                    if event.type == "text":
                        yield ProviderEvent.content(event.text)
                    elif event.type == "content_block_stop" and event.content_block.type == "tool_use":
                        block = event.content_block
                        tool_use = ToolUseBlock(id=block.id, name=block.name, input=block.input or {})
                        yield ProviderEvent.tool_call(tool_use)
        except APIError as e:
            logger.error(f"Anthropic API error: {e}")
            yield ProviderEvent.failure(f"AI provider error: {e.message}")
            return
        except Exception as e:
            logger.error(f"Streaming request failed: {e}", exc_info=True)
            yield ProviderEvent.failure(f"AI provider error: {e}")
            return

        yield ProviderEvent.finished()

    def estimate_request_tokens(self, messages: list[LLMMessage], system_prompt: str) -> int:
        """Estimate token count of a request for rate limiting."""
        text_content = system_prompt
        for message in messages:
            if isinstance(message.content, str):
                text_content += message.content
                continue
            for block in message.content:
                if block.type == "text":
                    text_content += block.text
                elif block.type == "tool_result":
                    text_content += block.content
        return self.token_counter.count(text_content)


_anthropic_client: AnthropicClient | None = None


def get_anthropic_client() -> AnthropicClient:
    """Get or create Anthropic client instance."""
    global _anthropic_client
    if _anthropic_client is None:
        _anthropic_client = AnthropicClient()
    return _anthropic_client
