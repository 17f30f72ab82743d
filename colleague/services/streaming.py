"""Server-Sent Events delivery for chat turns."""

import asyncio
import json
from collections.abc import AsyncIterator

from colleague.models.events import StreamEvent
from colleague.utils.logging import get_logger

logger = get_logger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

# Strong references so running turns are not garbage collected mid-flight
_running_turns: set[asyncio.Task] = set()


def format_sse_event(event: StreamEvent) -> str:
    """Format an event as an SSE data line."""
    return f"data: {json.dumps(event.to_wire(), default=str, ensure_ascii=False)}\n\n"


class TurnStream:
    """Runs a turn in a background task and hands its events to a consumer.

    The turn does not depend on the consumer: if the client goes away the task
    still runs to completion (tool calls finish, the reply is persisted) and the
    remaining events are simply dropped.
    """

    def __init__(self, events: AsyncIterator[StreamEvent], label: str = "turn"):
        self.label = label
        self._events = events
        self._queue: asyncio.Queue[StreamEvent | None] = asyncio.Queue()
        self._task: asyncio.Task | None = None

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self._pump(), name=self.label)
            _running_turns.add(self._task)
            self._task.add_done_callback(_running_turns.discard)
        return self._task

    async def _pump(self) -> None:
        terminal_sent = False
        try:
            async for event in self._events:
                terminal_sent = terminal_sent or event.is_terminal
                await self._queue.put(event)
        except Exception as e:
            logger.error(f"{self.label} failed: {e}", exc_info=True)
            if not terminal_sent:
                await self._queue.put(StreamEvent.error(f"Internal error: {e}"))
        finally:
            await self._queue.put(None)

    async def __aiter__(self) -> AsyncIterator[StreamEvent]:
        self.start()
        while True:
            event = await self._queue.get()
            if event is None:
                return
            yield event

    async def sse(self) -> AsyncIterator[str]:
        """Iterate the turn as SSE-formatted strings."""
        async for event in self:
            yield format_sse_event(event)
