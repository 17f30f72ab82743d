"""LLM-related data models and types (provider-agnostic)."""

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel


# Content block types
class TextBlock(BaseModel):
    """Text content block."""

    type: Literal["text"] = "text"
    text: str

    class Config:
        extra = "ignore"  # Ignore any additional fields from Anthropic


class ToolUseBlock(BaseModel):
    """Tool use content block."""

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any]

    class Config:
        extra = "ignore"  # Ignore any additional fields from Anthropic


class ToolResultBlock(BaseModel):
    """Tool result content block."""

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: str
    is_error: bool = False

    class Config:
        extra = "ignore"  # Ignore any additional fields from Anthropic


ContentBlock = TextBlock | ToolUseBlock | ToolResultBlock


class LLMMessage(BaseModel):
    """A message for LLM conversation."""

    role: Literal["user", "assistant"]
    content: str | list[ContentBlock]


class LLMToolDefinition(BaseModel):
    """Tool declaration exposed to the completion provider."""

    name: str
    description: str
    input_schema: dict[str, Any]


ProviderEventType = Literal["content", "tool_use", "error", "done"]


@dataclass
class ProviderEvent:
    """One event from a completion stream."""

    type: ProviderEventType
    text: str | None = None
    tool_use: ToolUseBlock | None = None
    error: str | None = None

    @classmethod
    def content(cls, text: str) -> "ProviderEvent":
        return cls(type="content", text=text)

    @classmethod
    def tool_call(cls, block: ToolUseBlock) -> "ProviderEvent":
        return cls(type="tool_use", tool_use=block)

    @classmethod
    def failure(cls, message: str) -> "ProviderEvent":
        return cls(type="error", error=message)

    @classmethod
    def finished(cls) -> "ProviderEvent":
        return cls(type="done")
