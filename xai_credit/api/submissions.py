"""In-flight guard serializing narrative-backed submissions per session"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Set

from xai_credit.domain.exceptions import SubmissionInProgressError


class SubmissionGuard:
    """
    Tracks sessions with a pending narrative provider call.

    At most one submission per session may be outstanding. Only touched from the event loop thread.
    """

    def __init__(self) -> None:
        self._in_flight: Set[str] = set()

    def is_pending(self, session_id: str) -> bool:
        return session_id in self._in_flight

    def begin(self, session_id: str) -> None:
        if session_id in self._in_flight:
            raise SubmissionInProgressError(f"A submission for session {session_id} is already in progress")
        self._in_flight.add(session_id)

    def finish(self, session_id: str) -> None:
        self._in_flight.discard(session_id)

    @asynccontextmanager
    async def hold(self, session_id: Optional[str]) -> AsyncIterator[None]:
        """Hold the session's flag for the duration of the block; anonymous requests are not guarded"""
        if session_id is None:
            yield
            return

        self.begin(session_id)
        try:
            yield
        finally:
            self.finish(session_id)
