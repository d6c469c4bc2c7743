"""
Tests for the remote job runner and the two-tier resolver
"""
from __future__ import annotations

from typing import Any, Dict, List

import pytest

from models import Job, JobSpec, JobStatus
from scrapers import BaseJobClient, EmptyResult, JobRunner, LookupSpecBuilder, Resolver
from utils.exceptions import (
    JobFailed,
    JobSubmissionError,
    JobTimeout,
    ProviderError,
    ResearchCancelled,
    ResolutionFailed,
)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.now += seconds


class ScriptedClient(BaseJobClient):
    """Returns scripted poll statuses; the last one repeats forever"""

    def __init__(self, statuses: List[Any], items: List[Dict[str, Any]] = None, submit_error: Exception = None):
        self.statuses = list(statuses)
        self.items = items if items is not None else []
        self.submit_error = submit_error
        self.polls = 0
        self.fetched = 0

    @property
    def name(self) -> str:
        return "Fake"

    async def submit(self, spec: JobSpec) -> Job:
        if self.submit_error is not None:
            raise self.submit_error
        return Job(id="run-1", status=JobStatus.READY, result_id="ds-1")

    async def poll(self, job_id: str) -> Job:
        self.polls += 1
        step = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if isinstance(step, Exception):
            raise step
        return Job(id=job_id, status=step, result_id="ds-1")

    async def fetch_results(self, job: Job) -> List[Dict[str, Any]]:
        self.fetched += 1
        return list(self.items)


def _spec() -> JobSpec:
    return JobSpec(actor_id="acme/actor", label="test")


def _runner(client: BaseJobClient, clock: FakeClock, timeout: float = 5, poll_interval: float = 1) -> JobRunner:
    return JobRunner(client, timeout=timeout, poll_interval=poll_interval, clock=clock, sleep=clock.sleep)


@pytest.mark.asyncio
async def test_run_returns_items_on_success() -> None:
    clock = FakeClock()
    client = ScriptedClient([JobStatus.RUNNING, JobStatus.SUCCEEDED], items=[{"id": 1}, {"id": 2}])

    items = await _runner(client, clock).run(_spec())

    assert items == [{"id": 1}, {"id": 2}]
    assert client.polls == 2
    assert client.fetched == 1


@pytest.mark.asyncio
async def test_run_times_out_within_one_poll_interval() -> None:
    clock = FakeClock()
    client = ScriptedClient([JobStatus.RUNNING])

    with pytest.raises(JobTimeout) as exc_info:
        await _runner(client, clock, timeout=5, poll_interval=1).run(_spec())

    assert 5 <= clock.now <= 6
    assert exc_info.value.job_id == "run-1"
    assert exc_info.value.last_status == "RUNNING"
    assert client.fetched == 0


@pytest.mark.parametrize("status", [JobStatus.FAILED, JobStatus.ABORTED, JobStatus.TIMED_OUT])
@pytest.mark.asyncio
async def test_run_raises_job_failed_on_failure_status(status: JobStatus) -> None:
    clock = FakeClock()
    client = ScriptedClient([JobStatus.RUNNING, status])

    with pytest.raises(JobFailed) as exc_info:
        await _runner(client, clock).run(_spec())

    assert exc_info.value.status == status.value
    assert client.fetched == 0


@pytest.mark.asyncio
async def test_poll_errors_are_tolerated() -> None:
    clock = FakeClock()
    client = ScriptedClient(
        [ProviderError("boom", provider="Fake"), JobStatus.RUNNING, JobStatus.SUCCEEDED],
        items=[{"id": 1}],
    )

    items = await _runner(client, clock).run(_spec())

    assert items == [{"id": 1}]
    assert client.polls == 3


@pytest.mark.asyncio
async def test_poll_errors_do_not_extend_the_deadline() -> None:
    clock = FakeClock()
    client = ScriptedClient([ProviderError("down", provider="Fake")])

    with pytest.raises(JobTimeout):
        await _runner(client, clock, timeout=3, poll_interval=1).run(_spec())

    assert clock.now <= 4


@pytest.mark.asyncio
async def test_empty_result_collection_is_valid() -> None:
    clock = FakeClock()
    client = ScriptedClient([JobStatus.SUCCEEDED], items=[])

    assert await _runner(client, clock).run(_spec()) == []


@pytest.mark.asyncio
async def test_submission_error_propagates_without_polling() -> None:
    clock = FakeClock()
    client = ScriptedClient([JobStatus.SUCCEEDED], submit_error=JobSubmissionError("rejected"))

    with pytest.raises(JobSubmissionError):
        await _runner(client, clock).run(_spec())

    assert client.polls == 0


# ----------------------------------------------------------------------
# Resolver
# ----------------------------------------------------------------------

class RecordingSpecs(LookupSpecBuilder):
    def direct(self, entity_key: str, kind: str, limit: int) -> JobSpec:
        return JobSpec(actor_id="direct", input={"key": entity_key, "kind": kind, "limit": limit})

    def search(self, entity_key: str, kind: str, limit: int) -> JobSpec:
        return JobSpec(actor_id="search", input={"key": entity_key, "kind": kind, "limit": limit})


class TierRunner:
    """Stands in for JobRunner; outcome per tier is a list or an exception"""

    def __init__(self, outcomes: Dict[str, Any]):
        self.outcomes = outcomes
        self.calls: List[str] = []

    async def run(self, spec: JobSpec, timeout=None, poll_interval=None):
        self.calls.append(spec.actor_id)
        outcome = self.outcomes[spec.actor_id]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.mark.asyncio
async def test_resolver_uses_direct_results_without_search() -> None:
    runner = TierRunner({"direct": [{"username": "acme"}], "search": [{"username": "other"}]})

    items = await Resolver(runner, RecordingSpecs()).resolve("acme", "details", 1)

    assert items == [{"username": "acme"}]
    assert runner.calls == ["direct"]


@pytest.mark.asyncio
async def test_resolver_falls_back_once_when_direct_is_empty() -> None:
    runner = TierRunner({"direct": [], "search": [{"username": "acme_oficial"}]})

    items = await Resolver(runner, RecordingSpecs()).resolve("acme", "details", 1)

    assert items == [{"username": "acme_oficial"}]
    assert runner.calls == ["direct", "search"]


@pytest.mark.asyncio
async def test_resolver_falls_back_when_direct_errors() -> None:
    runner = TierRunner({"direct": JobFailed("run-9", "FAILED"), "search": [{"id": 1}]})

    items = await Resolver(runner, RecordingSpecs()).resolve("acme", "posts", 5)

    assert items == [{"id": 1}]


@pytest.mark.asyncio
async def test_resolver_reports_both_tiers_when_everything_fails() -> None:
    runner = TierRunner({"direct": [], "search": JobTimeout("run-2", 5, "RUNNING")})

    with pytest.raises(ResolutionFailed) as exc_info:
        await Resolver(runner, RecordingSpecs()).resolve("acme", "details", 1)

    message = str(exc_info.value)
    assert "direct" in message
    assert "search" in message
    assert exc_info.value.entity_key == "acme"


@pytest.mark.asyncio
async def test_resolver_without_fallback_reraises_direct_error() -> None:
    runner = TierRunner({"direct": [], "search": [{"id": 1}]})

    with pytest.raises(EmptyResult):
        await Resolver(runner, RecordingSpecs()).resolve("acme", "details", 1, allow_fallback=False)

    assert runner.calls == ["direct"]


@pytest.mark.asyncio
async def test_resolver_does_not_start_search_after_stop() -> None:
    runner = TierRunner({"direct": JobFailed("run-9", "FAILED"), "search": [{"id": 1}]})

    def should_stop() -> bool:
        return bool(runner.calls)

    with pytest.raises(ResearchCancelled) as exc_info:
        await Resolver(runner, RecordingSpecs()).resolve("acme", "details", 1, should_stop=should_stop)

    assert runner.calls == ["direct"]
    assert isinstance(exc_info.value.__cause__, JobFailed)


@pytest.mark.asyncio
async def test_resolver_starts_nothing_when_already_stopped() -> None:
    runner = TierRunner({"direct": [{"id": 1}], "search": [{"id": 2}]})

    with pytest.raises(ResearchCancelled):
        await Resolver(runner, RecordingSpecs()).resolve("acme", "details", 1, should_stop=lambda: True)

    assert runner.calls == []
