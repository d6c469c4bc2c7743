"""
Tests for the Apify adapter, driven through an httpx mock transport
"""
from __future__ import annotations

import json

import httpx
import pytest
from tenacity import wait_none

from config import ApifySettings
from models import Job, JobSpec, JobStatus
from scrapers import ApifyJobClient
from utils.exceptions import ConfigurationError, JobSubmissionError, ProviderError


def _client(handler, **settings) -> ApifyJobClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ApifyJobClient("apify-token", ApifySettings(submit_attempts=1, **settings), client=http)


@pytest.mark.asyncio
async def test_submit_posts_input_and_returns_job() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"data": {"id": "run-1", "status": "READY", "defaultDatasetId": "ds-1"}})

    client = _client(handler)
    job = await client.submit(JobSpec(actor_id="apify/instagram-scraper", input={"resultsLimit": 3}))

    assert job == Job(id="run-1", status=JobStatus.READY, result_id="ds-1")
    assert "/acts/apify%2Finstagram-scraper/runs" in seen["url"]
    assert "token=apify-token" in seen["url"]
    assert seen["body"] == {"resultsLimit": 3}


@pytest.mark.asyncio
async def test_submit_error_response_raises_submission_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(402, json={"error": {"message": "Monthly usage exceeded"}})

    with pytest.raises(JobSubmissionError) as exc_info:
        await _client(handler).submit(JobSpec(actor_id="acme/actor"))

    assert "Monthly usage exceeded" in str(exc_info.value)


@pytest.mark.asyncio
async def test_submit_without_token_is_a_configuration_error() -> None:
    client = ApifyJobClient(None, ApifySettings(), client=httpx.AsyncClient(transport=httpx.MockTransport(
        lambda request: httpx.Response(201, json={"data": {"id": "x"}})
    )))

    assert not client.is_configured()
    with pytest.raises(ConfigurationError):
        await client.submit(JobSpec(actor_id="acme/actor"))


@pytest.mark.asyncio
async def test_poll_maps_run_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/actor-runs/run-1")
        return httpx.Response(200, json={"data": {"status": "TIMED-OUT", "defaultDatasetId": "ds-1"}})

    job = await _client(handler).poll("run-1")

    assert job.status == JobStatus.TIMED_OUT
    assert job.status.is_failure


@pytest.mark.asyncio
async def test_poll_error_response_raises_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    with pytest.raises(ProviderError) as exc_info:
        await _client(handler).poll("run-1")

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_fetch_results_reads_dataset_items() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/datasets/ds-1/items")
        return httpx.Response(200, json=[{"username": "acme"}])

    items = await _client(handler).fetch_results(Job(id="run-1", status=JobStatus.SUCCEEDED, result_id="ds-1"))

    assert items == [{"username": "acme"}]


@pytest.mark.asyncio
async def test_fetch_results_without_dataset_is_empty() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    job = Job(id="run-1", status=JobStatus.SUCCEEDED)
    assert await _client(handler).fetch_results(job) == []


@pytest.mark.asyncio
async def test_validate_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/users/me")
        status = 200 if request.url.params.get("token") == "apify-token" else 401
        return httpx.Response(status, json={})

    assert await _client(handler).validate_token() is True

    rejected = ApifyJobClient("wrong", ApifySettings(), client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    assert await rejected.validate_token() is False
    assert await ApifyJobClient("", ApifySettings()).validate_token() is False


def _retrying_client(handler, attempts: int = 3) -> ApifyJobClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ApifyJobClient(
        "apify-token", ApifySettings(submit_attempts=attempts), client=http, submit_wait=wait_none()
    )


@pytest.mark.asyncio
async def test_submit_retries_transient_errors() -> None:
    posts = []

    def handler(request: httpx.Request) -> httpx.Response:
        posts.append(request.method)
        if len(posts) == 1:
            return httpx.Response(503, text="unavailable")
        return httpx.Response(201, json={"data": {"id": "run-2", "status": "RUNNING"}})

    job = await _retrying_client(handler).submit(JobSpec(actor_id="acme/actor"))

    assert job.id == "run-2"
    assert posts == ["POST", "POST"]


@pytest.mark.asyncio
async def test_submit_gives_up_after_the_attempt_budget() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(429, json={"error": {"message": "Rate limit"}})

    with pytest.raises(JobSubmissionError) as exc_info:
        await _retrying_client(handler, attempts=3).submit(JobSpec(actor_id="acme/actor"))

    assert len(calls) == 3
    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 401, 403])
async def test_submit_does_not_retry_client_errors(status: int) -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(status, json={"error": {"message": "rejected"}})

    with pytest.raises(JobSubmissionError) as exc_info:
        await _retrying_client(handler).submit(JobSpec(actor_id="acme/actor"))

    assert len(calls) == 1
    assert not exc_info.value.transient


@pytest.mark.asyncio
async def test_submit_retries_network_errors() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if len(calls) < 3:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(201, json={"data": {"id": "run-3"}})

    job = await _retrying_client(handler).submit(JobSpec(actor_id="acme/actor"))

    assert job.id == "run-3"
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_poll_and_fetch_are_not_retried() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(503, text="unavailable")

    client = _retrying_client(handler)
    with pytest.raises(ProviderError):
        await client.poll("run-1")
    with pytest.raises(ProviderError):
        await client.fetch_results(Job(id="run-1", status=JobStatus.SUCCEEDED, result_id="ds-1"))

    assert len(calls) == 2
