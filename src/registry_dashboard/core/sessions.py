"""Per-session event channels for streaming push progress to clients."""

import asyncio
import logging

from .types import EventType, SessionEvent

logger = logging.getLogger(__name__)


class SessionChannel:
    """Queue of events for one connected stream reader."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        self.closed = False
        self._queue: asyncio.Queue[SessionEvent | None] = asyncio.Queue()

    def put(self, event: SessionEvent) -> bool:
        if self.closed:
            return False
        self._queue.put_nowait(event)
        if event.type is EventType.CLOSE:
            self.closed = True
        return True

    def terminate(self) -> None:
        """Stop the reader without delivering a close event."""
        self.closed = True
        self._queue.put_nowait(None)

    def empty(self) -> bool:
        return self._queue.empty()

    async def get(self) -> SessionEvent | None:
        """Wait for the next event; None once the channel was terminated."""
        return await self._queue.get()


class SessionRegistry:
    """Maps client-supplied session ids to their stream channels.

    One registry is created per application and handed to both the stream
    handler and the push orchestrator. All access happens on the event loop,
    so no locking is needed.
    """

    def __init__(self) -> None:
        self._channels: dict[str, SessionChannel] = {}

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._channels

    def __len__(self) -> int:
        return len(self._channels)

    def register(self, session_id: str) -> SessionChannel:
        """Register a new channel, replacing any channel under the same id.

        Args:
            session_id: Client-generated session identifier

        Returns:
            The newly registered channel
        """
        previous = self._channels.get(session_id)
        if previous is not None:
            logger.warning(
                "Session %r registered twice; replacing the existing stream", session_id
            )
            previous.terminate()

        channel = SessionChannel(session_id)
        self._channels[session_id] = channel
        return channel

    def unregister(self, session_id: str, channel: SessionChannel | None = None) -> None:
        """Release the channel for a session.

        Args:
            session_id: Session identifier
            channel: If given, only remove the mapping when it still points to
                this channel
        """
        current = self._channels.get(session_id)
        if current is None:
            return
        if channel is not None and current is not channel:
            return
        del self._channels[session_id]

    def emit(self, session_id: str | None, event: SessionEvent) -> bool:
        """Deliver an event to a session's channel.

        Delivery to an unknown or closed session is a no-op.

        Returns:
            True if the event was queued
        """
        if not session_id:
            return False
        channel = self._channels.get(session_id)
        if channel is None:
            return False
        return channel.put(event)
