"""
Card Price Checker - Resolution Session

The state a single-consumer UI renders:

    Idle -> Loading -> Succeeded(card) | Failed(error)

Submitting a new tag while one is loading cancels the pending resolution.
A cancelled or superseded resolution never reaches the listener; each
accepted resolution is delivered exactly once.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Callable

import structlog
from pydantic import BaseModel, ConfigDict

from cardprice.errors import InvalidInputError, ResolutionError
from cardprice.models import CardData
from cardprice.scraper.resolver import CardResolver

logger = structlog.get_logger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SessionSnapshot(BaseModel):
    """Immutable view of the session handed to listeners."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    state: SessionState = SessionState.IDLE
    tag: str | None = None
    card: CardData | None = None
    error: ResolutionError | None = None


Listener = Callable[[SessionSnapshot], None]


class ResolutionSession:
    """
    Owns at most one in-flight resolution.

    Usage:
        session = ResolutionSession(resolver, listener=render)
        session.submit("sv2a182")
        await session.wait()
    """

    def __init__(self, resolver: CardResolver, listener: Listener | None = None) -> None:
        self._resolver = resolver
        self._listener = listener
        self._snapshot = SessionSnapshot()
        self._task: asyncio.Task[None] | None = None

    @property
    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    @property
    def state(self) -> SessionState:
        return self._snapshot.state

    @property
    def is_loading(self) -> bool:
        return self._snapshot.state is SessionState.LOADING

    def submit(self, tag: str) -> asyncio.Task[None] | None:
        """
        Start resolving a tag, abandoning any pending resolution.

        Returns the task driving the resolution, or None when the tag was
        rejected up front.
        """
        self._abandon_pending()

        if tag is None or not tag.strip():
            self._transition(SessionSnapshot(state=SessionState.FAILED, tag=tag, error=InvalidInputError()))
            return None

        self._transition(SessionSnapshot(state=SessionState.LOADING, tag=tag))
        task = asyncio.create_task(self._run(tag))
        self._task = task
        return task

    def cancel(self) -> None:
        """Abandon the pending resolution and return to Idle."""
        if self._task is None:
            return
        self._abandon_pending()
        self._transition(SessionSnapshot())

    async def wait(self) -> SessionSnapshot:
        """Wait for the pending resolution (if any) and return the final snapshot."""
        task = self._task
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
        return self._snapshot

    async def _run(self, tag: str) -> None:
        task = asyncio.current_task()
        try:
            card = await self._resolver.resolve(tag)
        except ResolutionError as e:
            self._deliver(task, SessionSnapshot(state=SessionState.FAILED, tag=tag, error=e))
        except Exception as e:
            logger.error("session_unexpected_error", tag=tag, error=str(e), source="session")
            self._deliver(
                task,
                SessionSnapshot(state=SessionState.FAILED, tag=tag, error=ResolutionError(f"Unexpected error: {e}")),
            )
        else:
            self._deliver(task, SessionSnapshot(state=SessionState.SUCCEEDED, tag=tag, card=card))

    def _deliver(self, task: asyncio.Task | None, snapshot: SessionSnapshot) -> None:
        if task is None or task is not self._task:
            logger.debug("session_stale_result_dropped", tag=snapshot.tag, source="session")
            return
        self._task = None
        self._transition(snapshot)

    def _abandon_pending(self) -> None:
        if self._task is not None and not self._task.done():
            logger.info("session_resolution_abandoned", tag=self._snapshot.tag, source="session")
            self._task.cancel()
        self._task = None

    def _transition(self, snapshot: SessionSnapshot) -> None:
        self._snapshot = snapshot
        logger.debug("session_state_changed", state=snapshot.state.value, tag=snapshot.tag, source="session")
        if self._listener is not None:
            self._listener(snapshot)
