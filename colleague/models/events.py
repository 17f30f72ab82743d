"""Wire-visible stream events emitted during a chat turn."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, field_serializer
from pydantic.alias_generators import to_camel

StreamEventType = Literal["content", "tool_result", "tool_approval", "warning", "message_saved", "done", "error"]

TERMINAL_EVENT_TYPES: frozenset[str] = frozenset({"done", "error", "tool_approval"})


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ToolApprovalPayload(CamelModel):
    """Approval request surfaced to the human operator."""

    id: str
    tool_name: str
    tool_input: dict[str, Any]
    risk_level: int
    reason: str
    created_at: datetime
    expires_at: datetime | None = None

    @field_serializer("created_at", "expires_at")
    def _isoformat(self, value: datetime | None) -> str | None:
        return value.isoformat() if value is not None else None


class ToolResultPayload(CamelModel):
    """Result of an executed tool call."""

    tool_name: str
    success: bool
    output: Any = None
    error: str | None = None


class StreamEvent(CamelModel):
    """One event of a turn's ordered event stream."""

    type: StreamEventType
    data: str = ""
    message_id: str | None = None
    tool_approval: ToolApprovalPayload | None = None
    tool_result: ToolResultPayload | None = None

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_EVENT_TYPES

    def to_wire(self) -> dict[str, Any]:
        """Serialize as {type, data, messageId?, toolApproval?, toolResult?}."""
        payload = self.model_dump(by_alias=True, exclude_none=True)
        # Tool payloads pass through untouched, nulls included
        if self.tool_result is not None:
            payload["toolResult"]["output"] = self.tool_result.output
        if self.tool_approval is not None:
            payload["toolApproval"]["toolInput"] = self.tool_approval.tool_input
        return payload

    @classmethod
    def content(cls, text: str) -> "StreamEvent":
        return cls(type="content", data=text)

    @classmethod
    def tool_result_event(
        cls, tool_name: str, success: bool, output: Any = None, error: str | None = None
    ) -> "StreamEvent":
        return cls(
            type="tool_result",
            data=tool_name,
            tool_result=ToolResultPayload(tool_name=tool_name, success=success, output=output, error=error),
        )

    @classmethod
    def tool_approval_event(cls, approval: ToolApprovalPayload) -> "StreamEvent":
        return cls(type="tool_approval", data=approval.reason, tool_approval=approval)

    @classmethod
    def warning(cls, text: str) -> "StreamEvent":
        return cls(type="warning", data=text)

    @classmethod
    def message_saved(cls, message_id: str) -> "StreamEvent":
        return cls(type="message_saved", message_id=message_id)

    @classmethod
    def done(cls, message_id: str | None = None) -> "StreamEvent":
        return cls(type="done", message_id=message_id)

    @classmethod
    def error(cls, text: str) -> "StreamEvent":
        return cls(type="error", data=text)
