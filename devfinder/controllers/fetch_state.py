"""Fetch-state controller driving one query's Idle/Pending/Resolved/Rejected cycle."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, TypeVar

from devfinder.clients.contracts import FetchResult
from devfinder.clients.github import sanitize_log_extra
from devfinder.controllers.query_state import IDLE, PENDING, QueryState, Rejected, Resolved

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetcher = Callable[[str], Awaitable[FetchResult[T]]]
StateListener = Callable[[QueryState[T]], None]

UNEXPECTED_FAILURE_MESSAGE = "Something went wrong while contacting GitHub"


class FetchStateController(Generic[T]):
    """Owns the QueryState of one logical query and the generation guard.

    Each `start` bumps the generation counter and captures it in the spawned
    task. A result is applied only if its generation is still the latest, so a
    slow response for a superseded query key can never overwrite a newer state.
    """

    def __init__(
        self,
        fetcher: Fetcher[T],
        *,
        name: str,
        initial_state: QueryState[T] = IDLE,
        cancel_superseded: bool = False,
    ) -> None:
        self._fetcher = fetcher
        self._name = name
        self._state: QueryState[T] = initial_state
        self._cancel_superseded = cancel_superseded
        self._generation = 0
        self._query_key: str | None = None
        self._task: asyncio.Task[None] | None = None
        self._in_flight: set[asyncio.Task[None]] = set()
        self._listeners: list[StateListener[T]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> QueryState[T]:
        return self._state

    @property
    def query_key(self) -> str | None:
        return self._query_key

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, listener: StateListener[T]) -> Callable[[], None]:
        """Register a listener called with every new state; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def start(self, query_key: str) -> asyncio.Task[None]:
        """Move to Pending and issue exactly one fetch for `query_key`.

        Must be called from within a running event loop.
        """
        previous = self._task
        self._generation += 1
        generation = self._generation
        self._query_key = query_key

        if previous is not None and not previous.done():
            logger.info(
                "Superseding in-flight query",
                extra=sanitize_log_extra(controller=self._name, query_key=query_key, generation=generation),
            )
            if self._cancel_superseded:
                previous.cancel()

        self._transition(PENDING)
        task = asyncio.create_task(self._run(generation, query_key))
        # Superseded tasks stay referenced here until they finish
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        self._task = task
        return task

    def on_success(self, generation: int, value: T) -> bool:
        if not self._is_current(generation):
            return False
        self._transition(Resolved(value))
        return True

    def on_failure(self, generation: int, reason: str) -> bool:
        if not self._is_current(generation):
            return False
        self._transition(Rejected(reason))
        return True

    async def wait(self) -> QueryState[T]:
        """Wait for the latest in-flight fetch, if any, and return the current state."""
        task = self._task
        while task is not None and not task.done():
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
            # A newer start may have replaced the task while we waited
            task = self._task
        return self._state

    async def aclose(self) -> None:
        """Cancel every fetch still in flight, superseded ones included."""
        self._task = None
        for task in list(self._in_flight):
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _run(self, generation: int, query_key: str) -> None:
        try:
            result = await self._fetcher(query_key)
        except asyncio.CancelledError:
            logger.debug(
                "Query cancelled",
                extra=sanitize_log_extra(controller=self._name, query_key=query_key, generation=generation),
            )
            raise
        except Exception as exc:
            logger.exception(
                "Fetcher raised unexpectedly",
                extra=sanitize_log_extra(controller=self._name, query_key=query_key, error=str(exc)),
            )
            self.on_failure(generation, UNEXPECTED_FAILURE_MESSAGE)
            return

        if result.is_failed:
            self.on_failure(generation, result.error or UNEXPECTED_FAILURE_MESSAGE)
        else:
            self.on_success(generation, result.data)

    def _is_current(self, generation: int) -> bool:
        if generation == self._generation:
            return True
        logger.debug(
            "Discarding stale response",
            extra=sanitize_log_extra(controller=self._name, generation=generation, latest_generation=self._generation),
        )
        return False

    def _transition(self, state: QueryState[T]) -> None:
        self._state = state
        logger.debug(
            "Query state changed",
            extra=sanitize_log_extra(controller=self._name, query_key=self._query_key, status=state.status.value),
        )
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as exc:
                logger.exception(
                    "Query state listener failed",
                    extra=sanitize_log_extra(controller=self._name, status=state.status.value, error=str(exc)),
                )

    def __repr__(self) -> str:
        return f"<FetchStateController {self._name}: {self._state.status.value}>"
