"""Shared fixtures."""

import pytest
from fakes import FakeProvider, ToolCounter

from colleague.models.llm import ProviderEvent
from colleague.services.approvals import InMemoryApprovalStore
from colleague.services.conversations import InMemoryConversationRepository
from colleague.services.tool_loop import ToolUseLoop
from colleague.tools.registry import ToolsRegistry


@pytest.fixture
def tool_counter():
    return ToolCounter()


@pytest.fixture
def registry(tool_counter):
    """Registry with one tool per risk level."""
    return ToolsRegistry(
        [
            tool_counter.make("lookup", 1),
            tool_counter.make("edit", 2),
            tool_counter.make("deploy", 3),
        ]
    )


@pytest.fixture
def approval_store():
    return InMemoryApprovalStore()


@pytest.fixture
def repository():
    return InMemoryConversationRepository()


@pytest.fixture
async def conversation(repository):
    return await repository.create_conversation(user_id="user-1")


@pytest.fixture
def make_loop(registry, approval_store, repository):
    def factory(responses: list[list[ProviderEvent]], **kwargs) -> tuple[ToolUseLoop, FakeProvider]:
        provider = FakeProvider(responses)
        loop = ToolUseLoop(
            provider=provider,
            registry=kwargs.pop("registry", registry),
            approval_store=approval_store,
            repository=repository,
            **kwargs,
        )
        return loop, provider

    return factory
