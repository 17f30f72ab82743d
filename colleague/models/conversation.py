"""Conversation, message and request/response models."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import Field

from colleague.models.events import CamelModel


class Sender(StrEnum):
    """Author of a persisted message."""

    USER = "USER"
    AGENT = "AGENT"


@dataclass
class Conversation:
    """Conversation record."""

    id: str
    user_id: str | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    ended_at: datetime | None = None

    @property
    def is_ended(self) -> bool:
        return self.ended_at is not None


@dataclass(frozen=True)
class Message:
    """Persisted chat message. Immutable once created."""

    id: str
    conversation_id: str
    sender: Sender
    content: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class StreamChatRequest(CamelModel):
    """Request body for starting a streamed turn."""

    conversation_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=10_000)


class ToolApprovalDecisionRequest(CamelModel):
    """Request body for resuming a turn after an approval decision."""

    approval_id: str = Field(..., min_length=1)
    approved: bool
    conversation_id: str | None = None


class CreateConversationRequest(CamelModel):
    """Request body for creating a conversation."""

    user_id: str | None = None


class ConversationResponse(CamelModel):
    """Conversation as returned by the API."""

    id: str
    user_id: str | None
    started_at: datetime
    ended_at: datetime | None

    @classmethod
    def from_conversation(cls, conversation: Conversation) -> "ConversationResponse":
        return cls(
            id=conversation.id,
            user_id=conversation.user_id,
            started_at=conversation.started_at,
            ended_at=conversation.ended_at,
        )


class HealthResponse(CamelModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: datetime
    version: str
