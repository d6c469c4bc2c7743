"""
Job Runner
Drives the submit / poll / fetch protocol of one long-running remote job
"""
from typing import Any, Awaitable, Callable, Dict, List, Optional
import asyncio
import logging
import time

import httpx

from models import Job, JobSpec, JobStatus
from scrapers.base import BaseJobClient
from utils.exceptions import JobFailed, JobTimeout, ProviderError


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300.0
DEFAULT_POLL_INTERVAL = 3.0


class JobRunner:
    """
    Runs remote jobs to completion.

    Submission errors propagate immediately. Poll errors are logged and the
    loop keeps going; they do not move the deadline, which is wall-clock time
    since submission.
    """

    def __init__(
        self,
        client: BaseJobClient,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.client = client
        self.timeout = timeout
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep

    async def submit(self, spec: JobSpec) -> Job:
        return await self.client.submit(spec)

    async def poll(self, job_id: str) -> Job:
        return await self.client.poll(job_id)

    async def fetch_results(self, job: Job) -> List[Dict[str, Any]]:
        return await self.client.fetch_results(job)

    async def run(
        self,
        spec: JobSpec,
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        """
        Submit a job, wait for a terminal status and return its items

        Args:
            spec: job to run
            timeout: wall-clock limit in seconds (defaults to the runner's)
            poll_interval: seconds between polls (defaults to the runner's)

        Returns:
            Result items; an empty list is a valid outcome

        Raises:
            JobSubmissionError: the job could not be started
            JobFailed: FAILED / ABORTED / TIMED-OUT
            JobTimeout: no terminal status before the deadline
        """
        timeout = self.timeout if timeout is None else timeout
        poll_interval = self.poll_interval if poll_interval is None else poll_interval
        name = self.client.name

        job = await self.submit(spec)
        started = self._clock()
        last_status: JobStatus = job.status
        logger.info(
            f"[{name}] Job {job.id} submitted ({spec.label or spec.actor_id}), "
            f"status {last_status.value}, timeout {timeout:g}s, poll {poll_interval:g}s"
        )

        while self._clock() - started < timeout:
            await self._sleep(poll_interval)

            try:
                polled = await self.poll(job.id)
            except (ProviderError, httpx.HTTPError) as exc:
                logger.warning(f"[{name}] Poll of job {job.id} failed, retrying: {exc}")
                continue

            job = polled
            elapsed = self._clock() - started
            if job.status != last_status:
                logger.info(f"[{name}] Job {job.id}: {last_status.value} -> {job.status.value} ({elapsed:.0f}s)")
                last_status = job.status

            if job.status == JobStatus.SUCCEEDED:
                items = await self.fetch_results(job)
                logger.info(f"[{name}] Job {job.id} returned {len(items)} items ({elapsed:.0f}s)")
                return items

            if job.status.is_failure:
                logger.error(f"[{name}] Job {job.id} failed with {job.status.value} ({elapsed:.0f}s)")
                raise JobFailed(job.id, job.status.value)

        elapsed = self._clock() - started
        logger.error(f"[{name}] Job {job.id} timed out after {elapsed:.0f}s (status {last_status.value})")
        raise JobTimeout(job.id, timeout, last_status.value)
