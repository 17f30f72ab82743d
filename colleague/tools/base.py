"""Base types and definitions for tools."""

import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel

from colleague.models.llm import LLMToolDefinition, ToolResultBlock

RiskLevel = Literal[1, 2, 3]


class ToolResult(BaseModel):
    """Outcome of a single tool execution."""

    success: bool
    output: Any = None
    error: str | None = None

    @classmethod
    def failure(cls, error: str, output: Any = None) -> "ToolResult":
        return cls(success=False, output=output, error=error)

    def to_block(self, tool_use_id: str) -> ToolResultBlock:
        """Echo this result back to the provider as a tool_result block."""
        return ToolResultBlock(
            tool_use_id=tool_use_id,
            content=json.dumps(self.model_dump(exclude_none=True), default=str, ensure_ascii=False),
            is_error=not self.success,
        )


ToolHandler = Callable[[BaseModel], Awaitable[ToolResult]]


def requires_approval(risk_level: int) -> bool:
    """Levels 2 and 3 need a human decision before running."""
    return risk_level >= 2


@dataclass(frozen=True)
class ToolDefinition:
    """Definition of a tool available to the AI assistant."""

    name: str
    description: str
    input_schema_class: type[BaseModel]
    risk_level: RiskLevel
    handler: ToolHandler

    def __post_init__(self) -> None:
        if self.risk_level not in (1, 2, 3):
            raise ValueError(f"Tool {self.name!r} has invalid risk level {self.risk_level}")

    def get_json_schema(self) -> dict[str, Any]:
        """Get JSON schema for this tool's input."""
        return self.input_schema_class.model_json_schema()

    def parse_input(self, raw_input: dict[str, Any]) -> BaseModel:
        """Parse and validate tool input."""
        return self.input_schema_class.model_validate(raw_input or {})

    def to_llm_tool(self) -> LLMToolDefinition:
        return LLMToolDefinition(name=self.name, description=self.description, input_schema=self.get_json_schema())

    async def execute(self, raw_input: dict[str, Any]) -> ToolResult:
        return await self.handler(self.parse_input(raw_input))
