"""Tool-use conversation loop with risk-gated approval.

Each turn alternates between streaming a completion and dispatching the tool
calls it requested. Every iteration ends in one of four outcomes:

- Continue: tool results were appended, ask the provider again
- Suspend: a gated call is waiting for a human decision; the loop's history
  moves into the approval store and the stream ends with tool_approval
- Complete: the provider answered without tool calls
- Fail: the provider stream failed; nothing is persisted

A suspended turn is picked up again by ``resume``, which appends the decision
as a tool result and starts a fresh run of iterations.
"""

from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from colleague.clients.anthropic import CompletionProvider
from colleague.errors import AppError, ApprovalNotFoundError, ConversationEndedError, ConversationNotFoundError
from colleague.models.conversation import Sender
from colleague.models.events import StreamEvent
from colleague.models.llm import ContentBlock, LLMMessage, TextBlock, ToolResultBlock, ToolUseBlock
from colleague.services.approvals import ApprovalStore, PendingApproval
from colleague.services.conversations import ConversationRepository
from colleague.services.personality import PersonalityProfile, validate_response
from colleague.tools.base import requires_approval
from colleague.tools.registry import ToolsRegistry
from colleague.utils.logging import get_logger

logger = get_logger(__name__)

MAX_ITERATIONS = 10


@dataclass
class Continue:
    """Tool results were appended; run another iteration."""


@dataclass
class Suspend:
    """A gated tool call is waiting for approval."""

    approval: PendingApproval


@dataclass
class Complete:
    """The provider produced a final answer."""


@dataclass
class Fail:
    """The provider stream failed."""

    error: str


IterationOutcome = Continue | Suspend | Complete | Fail


def _skipped_result(call: ToolUseBlock, gated: ToolUseBlock) -> ToolResultBlock:
    return ToolResultBlock(
        tool_use_id=call.id,
        content=f"Tool '{call.name}' was not run because '{gated.name}' is awaiting approval.",
        is_error=True,
    )


@dataclass
class TurnState:
    """Working state of one loop run. Lives only as long as the generator."""

    conversation_id: str
    messages: list[LLMMessage]
    system_prompt: str
    iteration: int = 0
    full_text: str = ""
    outcome: IterationOutcome | None = None
    tool_calls: list[ToolUseBlock] = field(default_factory=list)


class ToolUseLoop:
    """Drives the provider/tool protocol for one conversation turn."""

    def __init__(
        self,
        provider: CompletionProvider,
        registry: ToolsRegistry,
        approval_store: ApprovalStore,
        repository: ConversationRepository,
        profile: PersonalityProfile | None = None,
        max_iterations: int = MAX_ITERATIONS,
    ):
        self.provider = provider
        self.registry = registry
        self.approval_store = approval_store
        self.repository = repository
        self.profile = profile or PersonalityProfile()
        self.max_iterations = max_iterations

    async def run(
        self, conversation_id: str, messages: list[LLMMessage], system_prompt: str
    ) -> AsyncIterator[StreamEvent]:
        """Run a turn from the given history.

        Yields content and tool_result events as they happen and ends with
        exactly one terminal event: done, error or tool_approval.
        """
        state = TurnState(conversation_id=conversation_id, messages=list(messages), system_prompt=system_prompt)
        async for event in self._drive(state):
            yield event

    async def resume(
        self, approval_id: str, approved: bool, conversation_id: str | None = None
    ) -> AsyncIterator[StreamEvent]:
        """Continue a suspended turn with the user's decision.

        The approval is discarded without running the tool when its
        conversation has since been ended or removed.
        """
        try:
            approval = await self._claim(approval_id, conversation_id)
        except AppError as e:
            logger.warning(f"Cannot resume approval {approval_id}: {e.message}")
            yield StreamEvent.error(e.message)
            return

        logger.info(f"Approval {approval_id} for {approval.tool_name}: {'approved' if approved else 'rejected'}")

        if approved:
            result = await self.registry.execute(approval.tool_name, approval.tool_input)
            yield StreamEvent.tool_result_event(approval.tool_name, result.success, result.output, result.error)
            block = result.to_block(approval.tool_use_id)
        else:
            block = ToolResultBlock(
                tool_use_id=approval.tool_use_id,
                content=f"User rejected execution of tool '{approval.tool_name}'.",
                is_error=True,
            )

        results = [*approval.prior_results, block, *approval.skipped_results]
        messages = [*approval.messages, LLMMessage(role="user", content=results)]
        state = TurnState(
            conversation_id=approval.conversation_id,
            messages=messages,
            system_prompt=approval.system_prompt,
        )
        async for event in self._drive(state):
            yield event

    async def _claim(self, approval_id: str, conversation_id: str | None) -> PendingApproval:
        approval = self.approval_store.get(approval_id)
        if approval is None or (conversation_id is not None and approval.conversation_id != conversation_id):
            raise ApprovalNotFoundError(approval_id)

        conversation = await self.repository.get_conversation_by_id(approval.conversation_id)
        if conversation is None or conversation.is_ended:
            self.approval_store.delete(approval_id)
            if conversation is None:
                raise ConversationNotFoundError(approval.conversation_id)
            raise ConversationEndedError(approval.conversation_id)

        # Only the caller that removes the approval may continue the turn
        claimed = self.approval_store.pop(approval_id)
        if claimed is None:
            raise ApprovalNotFoundError(approval_id)
        return claimed

    async def _drive(self, state: TurnState) -> AsyncIterator[StreamEvent]:
        while state.iteration < self.max_iterations:
            logger.debug(f"Conversation {state.conversation_id}: iteration {state.iteration + 1}")
            async for event in self._iterate(state):
                yield event

            outcome = state.outcome
            if isinstance(outcome, Continue):
                state.iteration += 1
                if state.iteration < self.max_iterations:
                    state.full_text = ""
                continue
            if isinstance(outcome, Suspend):
                logger.info(
                    f"Conversation {state.conversation_id}: {outcome.approval.tool_name} awaiting approval "
                    f"{outcome.approval.id}"
                )
                return
            if isinstance(outcome, Fail):
                logger.error(f"Conversation {state.conversation_id}: turn failed: {outcome.error}")
                return
            break
        else:
            logger.warning(f"Conversation {state.conversation_id}: stopped after {self.max_iterations} iterations")

        async for event in self._complete(state):
            yield event

    async def _iterate(self, state: TurnState) -> AsyncIterator[StreamEvent]:
        """Run one provider round-trip and dispatch its tool calls."""
        state.tool_calls = []
        async for provider_event in self.provider.stream_message(
            state.messages, state.system_prompt, self.registry.get_llm_tools()
        ):
            if provider_event.type == "content" and provider_event.text:
                state.full_text += provider_event.text
                yield StreamEvent.content(provider_event.text)
            elif provider_event.type == "tool_use" and provider_event.tool_use is not None:
                state.tool_calls.append(provider_event.tool_use)
            elif provider_event.type == "error":
                error = provider_event.error or "AI provider error"
                state.outcome = Fail(error)
                yield StreamEvent.error(error)
                return

        if not state.tool_calls:
            state.outcome = Complete()
            return

        assistant_content: list[ContentBlock] = []
        # Whitespace-only text blocks are rejected by the provider
        if state.full_text.strip():
            assistant_content.append(TextBlock(text=state.full_text))
        assistant_content.extend(state.tool_calls)
        state.messages.append(LLMMessage(role="assistant", content=assistant_content))

        results: list[ToolResultBlock] = []
        for index, call in enumerate(state.tool_calls):
            tool = self.registry.get_tool(call.name)
            if tool is None:
                logger.warning(f"Provider requested unknown tool {call.name}")
                results.append(
                    ToolResultBlock(tool_use_id=call.id, content=f"Error: Unknown tool {call.name}", is_error=True)
                )
                continue

            if requires_approval(tool.risk_level):
                approval = PendingApproval.snapshot(
                    tool_name=call.name,
                    tool_input=call.input,
                    tool_use_id=call.id,
                    risk_level=tool.risk_level,
                    conversation_id=state.conversation_id,
                    messages=state.messages,
                    system_prompt=state.system_prompt,
                    prior_results=results,
                    skipped_results=[_skipped_result(later, call) for later in state.tool_calls[index + 1 :]],
                )
                self.approval_store.put(approval)
                state.outcome = Suspend(approval)
                yield StreamEvent.tool_approval_event(approval.to_payload())
                return

            logger.info(f"Executing tool {call.name}")
            result = await self.registry.execute(call.name, call.input)
            yield StreamEvent.tool_result_event(call.name, result.success, result.output, result.error)
            results.append(result.to_block(call.id))

        state.messages.append(LLMMessage(role="user", content=results))
        state.outcome = Continue()

    async def _complete(self, state: TurnState) -> AsyncIterator[StreamEvent]:
        """Validate and persist the final assistant text, then close the stream."""
        if not state.full_text:
            yield StreamEvent.done()
            return

        try:
            validation = validate_response(state.full_text, self.profile)
            if not validation.is_valid:
                logger.warning(f"Response failed personality checks: {validation.failed_checks}")
                yield StreamEvent.warning(
                    f"Response did not match the personality profile: {', '.join(validation.failed_checks)}"
                )
        except Exception as e:
            logger.error(f"Response validation failed: {e}", exc_info=True)
            yield StreamEvent.warning("Response validation could not be completed")

        message = await self.repository.create_message(state.conversation_id, Sender.AGENT, state.full_text)
        logger.info(f"Conversation {state.conversation_id}: saved assistant message {message.id}")
        yield StreamEvent.done(message.id)
