"""Application error types."""

from typing import Any


class AppError(Exception):
    """Error with a stable code and HTTP status, rendered by the API layer."""

    def __init__(self, code: str, message: str, status_code: int = 500, details: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details


class ConversationNotFoundError(AppError):
    """Conversation does not exist."""

    def __init__(self, conversation_id: str):
        super().__init__("CONVERSATION_NOT_FOUND", "Conversation not found", 404, {"conversationId": conversation_id})


class ConversationEndedError(AppError):
    """Conversation has already been ended."""

    def __init__(self, conversation_id: str):
        super().__init__(
            "CONVERSATION_ENDED",
            "Cannot send message to ended conversation",
            400,
            {"conversationId": conversation_id},
        )


class ApprovalNotFoundError(AppError):
    """Approval id is unknown, expired, already resolved, or owned by another conversation."""

    def __init__(self, approval_id: str):
        super().__init__(
            "APPROVAL_NOT_FOUND",
            "Approval request not found or already resolved",
            404,
            {"approvalId": approval_id},
        )
