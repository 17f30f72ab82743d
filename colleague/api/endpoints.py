"""API endpoints for the colleague chat service."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from colleague import __version__
from colleague.errors import ConversationNotFoundError
from colleague.models.conversation import (
    ConversationResponse,
    CreateConversationRequest,
    HealthResponse,
    StreamChatRequest,
    ToolApprovalDecisionRequest,
)
from colleague.services.chat import ChatService, get_chat_service
from colleague.services.conversations import ConversationRepository, get_conversation_repository
from colleague.services.streaming import SSE_HEADERS, TurnStream
from colleague.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=__version__,
    )


@router.post("/conversations", response_model=ConversationResponse, status_code=201, tags=["Conversations"])
async def create_conversation(
    request: CreateConversationRequest | None = None,
    repository: ConversationRepository = Depends(get_conversation_repository),
) -> ConversationResponse:
    """Start a new conversation."""
    conversation = await repository.create_conversation(user_id=request.user_id if request else None)
    logger.info(f"Created conversation {conversation.id}")
    return ConversationResponse.from_conversation(conversation)


@router.post("/conversations/{conversation_id}/end", response_model=ConversationResponse, tags=["Conversations"])
async def end_conversation(
    conversation_id: str,
    repository: ConversationRepository = Depends(get_conversation_repository),
) -> ConversationResponse:
    """End a conversation. Further messages to it are rejected."""
    conversation = await repository.end_conversation(conversation_id)
    if conversation is None:
        raise ConversationNotFoundError(conversation_id)
    logger.info(f"Ended conversation {conversation_id}")
    return ConversationResponse.from_conversation(conversation)


@router.post("/chat/stream", tags=["Chat"])
async def stream_chat(
    request: StreamChatRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> StreamingResponse:
    """Send a message and stream the assistant's turn as Server-Sent Events."""
    logger.info(f"Streaming turn for conversation {request.conversation_id}: {request.content[:50]}...")
    turn = TurnStream(
        chat_service.stream_chat(request.conversation_id, request.content),
        label=f"chat:{request.conversation_id}",
    )
    return StreamingResponse(turn.sse(), media_type="text/event-stream", headers=SSE_HEADERS)


@router.post("/chat/stream/approval", tags=["Chat"])
async def stream_approval(
    request: ToolApprovalDecisionRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> StreamingResponse:
    """Approve or reject a pending tool call and stream the rest of the turn."""
    logger.info(f"Approval decision for {request.approval_id}: approved={request.approved}")
    turn = TurnStream(
        chat_service.stream_approval(request.approval_id, request.approved, request.conversation_id),
        label=f"approval:{request.approval_id}",
    )
    return StreamingResponse(turn.sse(), media_type="text/event-stream", headers=SSE_HEADERS)
