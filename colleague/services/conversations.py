"""Conversation and message persistence interface and in-memory implementation."""

from datetime import UTC, datetime
from typing import Protocol

from cuid2 import cuid_wrapper

from colleague.errors import ConversationNotFoundError
from colleague.models.conversation import Conversation, Message, Sender

cuid = cuid_wrapper()


class ConversationRepository(Protocol):
    """Interface for conversation and message storage.

    The chat loop only needs these operations, so a database-backed
    implementation can be dropped in without touching the loop.
    """

    async def create_conversation(self, user_id: str | None = None) -> Conversation: ...

    async def get_conversation_by_id(self, conversation_id: str) -> Conversation | None: ...

    async def end_conversation(self, conversation_id: str) -> Conversation | None: ...

    async def create_message(self, conversation_id: str, sender: Sender, content: str) -> Message:
        """Persist a message.

        Raises:
            ConversationNotFoundError: If the conversation does not exist
        """
        ...

    async def get_messages_by_conversation_id(self, conversation_id: str, limit: int = 100) -> list[Message]:
        """Most recent messages of a conversation, oldest first."""
        ...


class InMemoryConversationRepository:
    """In-memory conversation storage for development and tests."""

    def __init__(self):
        self.conversations: dict[str, Conversation] = {}
        self.messages: dict[str, list[Message]] = {}

    async def create_conversation(self, user_id: str | None = None) -> Conversation:
        conversation = Conversation(id=cuid(), user_id=user_id)
        self.conversations[conversation.id] = conversation
        self.messages[conversation.id] = []
        return conversation

    async def get_conversation_by_id(self, conversation_id: str) -> Conversation | None:
        return self.conversations.get(conversation_id)

    async def end_conversation(self, conversation_id: str) -> Conversation | None:
        conversation = self.conversations.get(conversation_id)
        if conversation is None:
            return None
        if conversation.ended_at is None:
            conversation.ended_at = datetime.now(UTC)
        return conversation

    async def create_message(self, conversation_id: str, sender: Sender, content: str) -> Message:
        if conversation_id not in self.conversations:
            raise ConversationNotFoundError(conversation_id)

        message = Message(id=cuid(), conversation_id=conversation_id, sender=sender, content=content)
        self.messages[conversation_id].append(message)
        return message

    async def get_messages_by_conversation_id(self, conversation_id: str, limit: int = 100) -> list[Message]:
        messages = self.messages.get(conversation_id, [])
        return list(messages[-limit:]) if limit > 0 else []


conversation_repository = InMemoryConversationRepository()


def get_conversation_repository() -> InMemoryConversationRepository:
    """Get the process-wide conversation repository."""
    return conversation_repository
