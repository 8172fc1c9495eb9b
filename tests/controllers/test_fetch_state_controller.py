from __future__ import annotations

import asyncio
import logging
from typing import Any

import pytest

from devfinder.clients.contracts import FailureKind, FetchResult, FetchState
from devfinder.controllers.fetch_state import UNEXPECTED_FAILURE_MESSAGE, FetchStateController
from devfinder.controllers.query_state import IDLE, PENDING, Idle, Pending, QueryStatus, Rejected, Resolved


class GatedFetcher:
    """Fetcher whose responses are released manually, per query key."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self._gates: dict[str, asyncio.Future[FetchResult[str]]] = {}

    def _gate(self, key: str) -> asyncio.Future[FetchResult[str]]:
        if key not in self._gates:
            self._gates[key] = asyncio.get_running_loop().create_future()
        return self._gates[key]

    async def __call__(self, key: str) -> FetchResult[str]:
        self.calls.append(key)
        return await self._gate(key)

    def succeed(self, key: str, value: str | None = None) -> None:
        self._gate(key).set_result(FetchResult(state=FetchState.OK, data=value or f"value-for-{key}"))

    def fail(self, key: str, reason: str) -> None:
        self._gate(key).set_result(FetchResult.failed(FailureKind.PROTOCOL, reason, status_code=500))


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


def test_initial_state_defaults_to_idle() -> None:
    async def fetcher(_: str) -> FetchResult[str]:
        raise AssertionError("should not be called")

    controller = FetchStateController(fetcher, name="profile")

    assert controller.state is IDLE
    assert controller.state.status == QueryStatus.IDLE
    assert controller.generation == 0
    assert controller.query_key is None


def test_initial_state_can_start_pending() -> None:
    async def fetcher(_: str) -> FetchResult[str]:
        raise AssertionError("should not be called")

    controller = FetchStateController(fetcher, name="repositories", initial_state=PENDING)

    assert isinstance(controller.state, Pending)


@pytest.mark.asyncio
async def test_start_moves_to_pending_then_resolved() -> None:
    fetcher = GatedFetcher()
    controller = FetchStateController(fetcher, name="profile")

    controller.start("octocat")

    assert isinstance(controller.state, Pending)
    assert controller.query_key == "octocat"

    fetcher.succeed("octocat", "The Octocat")
    state = await controller.wait()

    assert state == Resolved("The Octocat")
    assert fetcher.calls == ["octocat"]


@pytest.mark.asyncio
async def test_failed_result_moves_to_rejected_with_reason() -> None:
    fetcher = GatedFetcher()
    controller = FetchStateController(fetcher, name="profile")

    controller.start("ghost")
    fetcher.fail("ghost", "User not found")
    state = await controller.wait()

    assert isinstance(state, Rejected)
    assert state.reason == "User not found"
    assert state.status == QueryStatus.REJECTED


@pytest.mark.asyncio
async def test_empty_result_is_resolved() -> None:
    async def fetcher(_: str) -> FetchResult[tuple[str, ...]]:
        return FetchResult(state=FetchState.EMPTY, data=())

    controller = FetchStateController(fetcher, name="repositories", initial_state=PENDING)
    controller.start("owner")

    assert await controller.wait() == Resolved(())


@pytest.mark.asyncio
async def test_stale_response_is_ignored_when_it_arrives_last() -> None:
    fetcher = GatedFetcher()
    controller = FetchStateController(fetcher, name="profile")

    controller.start("slow-user")
    controller.start("fast-user")

    fetcher.succeed("fast-user")
    await _settle()
    assert controller.state == Resolved("value-for-fast-user")

    fetcher.succeed("slow-user")
    await _settle()

    assert controller.state == Resolved("value-for-fast-user")
    assert fetcher.calls == ["slow-user", "fast-user"]


@pytest.mark.asyncio
async def test_stale_failure_does_not_overwrite_pending_state() -> None:
    fetcher = GatedFetcher()
    controller = FetchStateController(fetcher, name="profile")

    controller.start("first")
    controller.start("second")
    fetcher.fail("first", "boom")
    await _settle()

    assert isinstance(controller.state, Pending)

    fetcher.succeed("second")
    assert await controller.wait() == Resolved("value-for-second")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "resolution_order",
    [
        ["a", "b", "c"],
        ["c", "b", "a"],
        ["b", "c", "a"],
        ["a", "c", "b"],
    ],
)
async def test_only_last_started_key_determines_final_state(resolution_order: list[str]) -> None:
    fetcher = GatedFetcher()
    controller = FetchStateController(fetcher, name="profile")

    for key in ["a", "b", "c"]:
        controller.start(key)

    for key in resolution_order:
        fetcher.succeed(key)
        await _settle()

    assert controller.state == Resolved("value-for-c")
    assert controller.generation == 3


@pytest.mark.asyncio
async def test_restart_from_resolved_returns_to_pending() -> None:
    fetcher = GatedFetcher()
    controller = FetchStateController(fetcher, name="profile")

    controller.start("octocat")
    fetcher.succeed("octocat")
    await controller.wait()

    controller.start("hubot")

    assert isinstance(controller.state, Pending)

    fetcher.fail("hubot", "User not found")
    assert await controller.wait() == Rejected("User not found")


@pytest.mark.asyncio
async def test_callbacks_with_old_generation_are_rejected() -> None:
    fetcher = GatedFetcher()
    controller = FetchStateController(fetcher, name="profile")

    controller.start("one")
    controller.start("two")

    assert controller.on_success(1, "stale") is False
    assert controller.on_failure(1, "stale") is False
    assert isinstance(controller.state, Pending)
    assert controller.on_success(2, "fresh") is True
    assert controller.state == Resolved("fresh")

    fetcher.succeed("one")
    fetcher.succeed("two")
    await controller.wait()


@pytest.mark.asyncio
async def test_fetcher_exception_becomes_rejected(caplog: pytest.LogCaptureFixture) -> None:
    async def fetcher(_: str) -> FetchResult[str]:
        raise RuntimeError("unexpected payload")

    controller = FetchStateController(fetcher, name="profile")

    with caplog.at_level(logging.ERROR, logger="devfinder.controllers.fetch_state"):
        controller.start("octocat")
        state = await controller.wait()

    assert state == Rejected(UNEXPECTED_FAILURE_MESSAGE)
    assert any(record.msg == "Fetcher raised unexpectedly" for record in caplog.records)


@pytest.mark.asyncio
async def test_cancel_superseded_cancels_previous_task() -> None:
    fetcher = GatedFetcher()
    controller = FetchStateController(fetcher, name="profile", cancel_superseded=True)

    first = controller.start("first")
    controller.start("second")
    await _settle()

    assert first.cancelled()

    fetcher.succeed("second")
    assert await controller.wait() == Resolved("value-for-second")


@pytest.mark.asyncio
async def test_superseded_task_keeps_running_without_cancellation() -> None:
    fetcher = GatedFetcher()
    controller = FetchStateController(fetcher, name="profile")

    first = controller.start("first")
    controller.start("second")
    await _settle()

    assert not first.done()

    fetcher.succeed("first")
    await first

    assert isinstance(controller.state, Pending)
    await controller.aclose()


@pytest.mark.asyncio
async def test_listeners_receive_every_transition_until_unsubscribed() -> None:
    fetcher = GatedFetcher()
    controller = FetchStateController(fetcher, name="profile")
    seen: list[Any] = []
    unsubscribe = controller.subscribe(seen.append)

    controller.start("octocat")
    fetcher.succeed("octocat")
    await controller.wait()
    unsubscribe()

    controller.start("hubot")

    assert seen == [PENDING, Resolved("value-for-octocat")]
    await controller.aclose()


@pytest.mark.asyncio
async def test_aclose_cancels_in_flight_fetch_and_leaves_state_pending() -> None:
    fetcher = GatedFetcher()
    controller = FetchStateController(fetcher, name="profile")

    task = controller.start("octocat")
    await controller.aclose()

    assert task.cancelled()
    assert isinstance(controller.state, Pending)


@pytest.mark.asyncio
async def test_wait_without_start_returns_current_state() -> None:
    async def fetcher(_: str) -> FetchResult[str]:
        raise AssertionError("should not be called")

    controller = FetchStateController(fetcher, name="profile")

    assert isinstance(await controller.wait(), Idle)


@pytest.mark.asyncio
async def test_failing_listener_does_not_stall_the_query(caplog: pytest.LogCaptureFixture) -> None:
    fetcher = GatedFetcher()
    controller = FetchStateController(fetcher, name="profile")
    seen: list[Any] = []

    def broken_listener(_: Any) -> None:
        raise RuntimeError("renderer crashed")

    controller.subscribe(broken_listener)
    controller.subscribe(seen.append)

    with caplog.at_level(logging.ERROR, logger="devfinder.controllers.fetch_state"):
        task = controller.start("octocat")
        fetcher.succeed("octocat")
        state = await controller.wait()

    assert task.done() and task.exception() is None
    assert state == Resolved("value-for-octocat")
    assert seen == [PENDING, Resolved("value-for-octocat")]
    assert fetcher.calls == ["octocat"]
    assert sum(record.msg == "Query state listener failed" for record in caplog.records) == 2


@pytest.mark.asyncio
async def test_superseded_tasks_stay_tracked_until_done_and_aclose_cancels_them() -> None:
    fetcher = GatedFetcher()
    controller = FetchStateController(fetcher, name="profile")

    first = controller.start("first")
    second = controller.start("second")
    await _settle()

    assert controller._in_flight == {first, second}

    await controller.aclose()

    assert first.cancelled()
    assert second.cancelled()
    assert controller._in_flight == set()


@pytest.mark.asyncio
async def test_finished_tasks_are_released() -> None:
    fetcher = GatedFetcher()
    controller = FetchStateController(fetcher, name="profile")

    first = controller.start("first")
    controller.start("second")
    fetcher.succeed("first")
    await first
    await _settle()

    assert first not in controller._in_flight
    assert len(controller._in_flight) == 1

    fetcher.succeed("second")
    await controller.wait()
    await _settle()

    assert controller._in_flight == set()
