"""Chat service: starts and resumes streamed conversation turns."""

from collections.abc import AsyncIterator

from colleague.clients.anthropic import CompletionProvider, get_anthropic_client
from colleague.config import get_settings
from colleague.errors import AppError, ConversationEndedError, ConversationNotFoundError
from colleague.models.conversation import Message, Sender
from colleague.models.events import StreamEvent
from colleague.models.llm import LLMMessage
from colleague.services.approvals import ApprovalStore, get_approval_store
from colleague.services.conversations import ConversationRepository, get_conversation_repository
from colleague.services.personality import PersonalityProfile, build_system_prompt
from colleague.services.tool_loop import ToolUseLoop
from colleague.tools.registry import ToolsRegistry, get_tools_registry
from colleague.utils.logging import get_logger
from colleague.utils.tokens import TokenCounter, get_token_counter

logger = get_logger(__name__)

HISTORY_FETCH_LIMIT = 100


def to_llm_messages(
    messages: list[Message], max_tokens: int, token_counter: TokenCounter | None = None
) -> list[LLMMessage]:
    """Convert persisted messages into provider history within a token budget.

    The newest messages are kept. The result starts with a user turn since the
    provider rejects histories that open with the assistant.
    """
    counter = token_counter or get_token_counter()

    selected: list[LLMMessage] = []
    used = 0
    for message in reversed(messages):
        tokens = counter.count(message.content)
        if used + tokens > max_tokens:
            break
        role = "user" if message.sender == Sender.USER else "assistant"
        selected.append(LLMMessage(role=role, content=message.content))
        used += tokens
    selected.reverse()

    while selected and selected[0].role == "assistant":
        selected.pop(0)

    if len(selected) < len(messages):
        logger.debug(f"History trimmed from {len(messages)} to {len(selected)} messages")
    return selected


class ChatService:
    """Entry points for initiating and resuming chat turns."""

    def __init__(
        self,
        loop: ToolUseLoop,
        repository: ConversationRepository,
        profile: PersonalityProfile | None = None,
        context_max_tokens: int | None = None,
        token_counter: TokenCounter | None = None,
    ):
        self.loop = loop
        self.repository = repository
        self.profile = profile or loop.profile
        self.context_max_tokens = context_max_tokens or get_settings().context_max_tokens
        self.token_counter = token_counter or get_token_counter()

    async def stream_chat(self, conversation_id: str, content: str) -> AsyncIterator[StreamEvent]:
        """Persist a user message and stream the assistant's turn."""
        try:
            conversation = await self.repository.get_conversation_by_id(conversation_id)
            if conversation is None:
                raise ConversationNotFoundError(conversation_id)
            if conversation.is_ended:
                raise ConversationEndedError(conversation_id)
        except AppError as e:
            logger.warning(f"Rejected message for conversation {conversation_id}: {e.message}")
            yield StreamEvent.error(e.message)
            return

        previous = await self.repository.get_messages_by_conversation_id(conversation_id, limit=HISTORY_FETCH_LIMIT)
        history = to_llm_messages(previous, self.context_max_tokens, self.token_counter)

        user_message = await self.repository.create_message(conversation_id, Sender.USER, content)
        yield StreamEvent.message_saved(user_message.id)

        history.append(LLMMessage(role="user", content=content))
        system_prompt = build_system_prompt(self.profile)

        logger.info(f"Conversation {conversation_id}: starting turn with {len(history)} messages")
        async for event in self.loop.run(conversation_id, history, system_prompt):
            yield event

    async def stream_approval(
        self, approval_id: str, approved: bool, conversation_id: str | None = None
    ) -> AsyncIterator[StreamEvent]:
        """Apply an approval decision and stream the rest of the turn."""
        async for event in self.loop.resume(approval_id, approved, conversation_id):
            yield event


def create_chat_service(
    provider: CompletionProvider | None = None,
    registry: ToolsRegistry | None = None,
    approval_store: ApprovalStore | None = None,
    repository: ConversationRepository | None = None,
    profile: PersonalityProfile | None = None,
) -> ChatService:
    """Wire a chat service, defaulting to the process-wide collaborators."""
    repository = repository if repository is not None else get_conversation_repository()
    loop = ToolUseLoop(
        provider=provider or get_anthropic_client(),
        registry=registry if registry is not None else get_tools_registry(),
        approval_store=approval_store if approval_store is not None else get_approval_store(),
        repository=repository,
        profile=profile,
    )
    return ChatService(loop=loop, repository=repository)


_chat_service: ChatService | None = None


def get_chat_service() -> ChatService:
    """Get or create chat service instance."""
    global _chat_service
    if _chat_service is None:
        _chat_service = create_chat_service()
    return _chat_service
