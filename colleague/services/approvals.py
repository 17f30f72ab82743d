"""Pending tool approvals for suspended conversation turns."""

import copy
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from cuid2 import cuid_wrapper

from colleague.config import get_settings
from colleague.models.events import ToolApprovalPayload
from colleague.models.llm import LLMMessage, ToolResultBlock
from colleague.utils.logging import get_logger

logger = get_logger(__name__)

cuid = cuid_wrapper()

RISK_LABELS = {2: "moderate-risk", 3: "high-risk"}


def approval_reason(tool_name: str, risk_level: int) -> str:
    """Human-readable explanation of why a tool call needs approval."""
    label = RISK_LABELS.get(risk_level, "risky")
    return f"'{tool_name}' is a {label} tool (level {risk_level}) and requires your confirmation before it runs."


@dataclass
class PendingApproval:
    """A gated tool call plus everything needed to resume the turn."""

    tool_name: str
    tool_input: dict[str, Any]
    tool_use_id: str
    risk_level: int
    conversation_id: str
    messages: list[LLMMessage]
    system_prompt: str
    # Results for the other calls of the suspended iteration, in call order
    prior_results: list[ToolResultBlock] = field(default_factory=list)
    skipped_results: list[ToolResultBlock] = field(default_factory=list)
    id: str = field(default_factory=lambda: cuid())
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    expires_at: datetime | None = None

    @classmethod
    def snapshot(
        cls,
        *,
        tool_name: str,
        tool_input: dict[str, Any],
        tool_use_id: str,
        risk_level: int,
        conversation_id: str,
        messages: list[LLMMessage],
        system_prompt: str,
        prior_results: list[ToolResultBlock] | None = None,
        skipped_results: list[ToolResultBlock] | None = None,
    ) -> "PendingApproval":
        """Create an approval holding a deep copy of the loop's history."""
        return cls(
            tool_name=tool_name,
            tool_input=copy.deepcopy(tool_input),
            tool_use_id=tool_use_id,
            risk_level=risk_level,
            conversation_id=conversation_id,
            messages=[message.model_copy(deep=True) for message in messages],
            system_prompt=system_prompt,
            prior_results=list(prior_results or []),
            skipped_results=list(skipped_results or []),
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.now(UTC)) >= self.expires_at

    def to_payload(self) -> ToolApprovalPayload:
        return ToolApprovalPayload(
            id=self.id,
            tool_name=self.tool_name,
            tool_input=self.tool_input,
            risk_level=self.risk_level,
            reason=approval_reason(self.tool_name, self.risk_level),
            created_at=self.created_at,
            expires_at=self.expires_at,
        )


class ApprovalStore(Protocol):
    """Keyed store of pending approvals. Every operation is atomic."""

    def put(self, approval: PendingApproval) -> None: ...

    def get(self, approval_id: str) -> PendingApproval | None: ...

    def pop(self, approval_id: str) -> PendingApproval | None:
        """Remove and return an approval; None if another caller got there first."""
        ...

    def delete(self, approval_id: str) -> bool: ...


class InMemoryApprovalStore:
    """Process-local approval store. Pending approvals are lost on restart."""

    def __init__(self, ttl_minutes: int | None = None):
        """Initialize approval store.

        Args:
            ttl_minutes: Minutes before an approval expires, None to keep until resolved
        """
        self._approvals: dict[str, PendingApproval] = {}
        self._lock = threading.Lock()
        self.ttl = timedelta(minutes=ttl_minutes) if ttl_minutes else None

    def put(self, approval: PendingApproval) -> None:
        if self.ttl is not None and approval.expires_at is None:
            approval.expires_at = approval.created_at + self.ttl
        with self._lock:
            self._cleanup_expired()
            self._approvals[approval.id] = approval
        logger.debug(f"Stored approval {approval.id} for tool {approval.tool_name}")

    def get(self, approval_id: str) -> PendingApproval | None:
        """Get an approval if it exists and has not expired."""
        with self._lock:
            self._cleanup_expired()
            return self._approvals.get(approval_id)

    def pop(self, approval_id: str) -> PendingApproval | None:
        with self._lock:
            self._cleanup_expired()
            return self._approvals.pop(approval_id, None)

    def delete(self, approval_id: str) -> bool:
        with self._lock:
            return self._approvals.pop(approval_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._approvals)

    def _cleanup_expired(self) -> None:
        """Drop expired approvals. Caller holds the lock."""
        now = datetime.now(UTC)
        expired = [approval_id for approval_id, a in self._approvals.items() if a.is_expired(now)]
        for approval_id in expired:
            del self._approvals[approval_id]
        if expired:
            logger.info(f"Expired {len(expired)} pending approvals")


_approval_store: InMemoryApprovalStore | None = None


def get_approval_store() -> InMemoryApprovalStore:
    """Get or create the process-wide approval store."""
    global _approval_store
    if _approval_store is None:
        _approval_store = InMemoryApprovalStore(ttl_minutes=get_settings().approval_ttl_minutes)
    return _approval_store
