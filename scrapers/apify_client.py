"""
Apify Client
Actor-run adapter (start run / read run / read dataset) over the Apify v2 API
"""
from typing import Any, Dict, List, Optional
from urllib.parse import quote
import logging

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from config import ApifySettings
from models import Job, JobSpec, JobStatus
from scrapers.base import BaseJobClient
from utils.exceptions import ConfigurationError, JobSubmissionError, ProviderError


logger = logging.getLogger(__name__)


def _parse_status(raw: Optional[str]) -> JobStatus:
    try:
        return JobStatus(str(raw or "").upper())
    except ValueError:
        logger.warning(f"[Apify] Unknown run status {raw!r}, treating as RUNNING")
        return JobStatus.RUNNING


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        return str(error.get("message") or error)
    return response.text[:200]


def _is_transient_submit_error(exc: BaseException) -> bool:
    return isinstance(exc, JobSubmissionError) and exc.transient


class ApifyJobClient(BaseJobClient):
    """
    Apify actor runs as remote jobs.

    Only the submit step is retried (bounded attempts with exponential
    backoff), and only for network errors, 429 and 5xx; poll and fetch
    errors surface immediately to the JobRunner.
    """

    def __init__(
        self,
        token: Optional[str],
        settings: Optional[ApifySettings] = None,
        client: Optional[httpx.AsyncClient] = None,
        submit_wait=None,
    ):
        self.settings = settings or ApifySettings()
        self.token = (token or "").strip()
        self.base_url = self.settings.base_url.rstrip("/")
        self._client = client
        self._owns_client = client is None
        self._submit_wait = submit_wait if submit_wait is not None else wait_exponential(multiplier=1, min=1, max=10)

    @property
    def name(self) -> str:
        return "Apify"

    def is_configured(self) -> bool:
        return bool(self.token)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.settings.request_timeout,
                headers={"Accept": "application/json"},
            )
        return self._client

    def _params(self) -> Dict[str, str]:
        if not self.token:
            raise ConfigurationError("Apify token is not configured")
        return {"token": self.token}

    async def submit(self, spec: JobSpec) -> Job:
        attempts = max(1, int(self.settings.submit_attempts))
        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=self._submit_wait,
            retry=retry_if_exception(_is_transient_submit_error),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._submit_once(spec)

    async def _submit_once(self, spec: JobSpec) -> Job:
        url = f"{self.base_url}/acts/{quote(spec.actor_id, safe='')}/runs"
        logger.info(f"[Apify] Starting actor {spec.actor_id} ({spec.label or 'no label'})")
        try:
            response = await self._get_client().post(url, params=self._params(), json=spec.input)
        except httpx.RequestError as exc:
            raise JobSubmissionError(f"Network error starting actor {spec.actor_id}: {exc}") from exc

        if response.status_code >= 400:
            raise JobSubmissionError(
                f"Apify start error ({response.status_code}): {_error_message(response)}",
                status_code=response.status_code,
            )

        data = (response.json() or {}).get("data") or {}
        run_id = data.get("id")
        if not run_id:
            raise JobSubmissionError("Apify did not return a run id", status_code=response.status_code)

        return Job(
            id=run_id,
            status=_parse_status(data.get("status") or JobStatus.READY.value),
            result_id=data.get("defaultDatasetId"),
        )

    async def poll(self, job_id: str) -> Job:
        url = f"{self.base_url}/actor-runs/{job_id}"
        try:
            response = await self._get_client().get(url, params=self._params())
        except httpx.RequestError as exc:
            raise ProviderError(f"Network error reading run {job_id}: {exc}", provider=self.name) from exc

        if response.status_code >= 400:
            raise ProviderError(
                f"Apify status error ({response.status_code})",
                provider=self.name,
                status_code=response.status_code,
            )

        data = (response.json() or {}).get("data") or {}
        return Job(
            id=job_id,
            status=_parse_status(data.get("status")),
            result_id=data.get("defaultDatasetId"),
        )

    async def fetch_results(self, job: Job) -> List[Dict[str, Any]]:
        if not job.result_id:
            logger.warning(f"[Apify] Run {job.id} has no dataset")
            return []

        url = f"{self.base_url}/datasets/{job.result_id}/items"
        try:
            response = await self._get_client().get(url, params=self._params())
        except httpx.RequestError as exc:
            raise ProviderError(f"Network error fetching dataset {job.result_id}: {exc}", provider=self.name) from exc

        if response.status_code >= 400:
            raise ProviderError(
                f"Failed to fetch results: {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
            )

        items = response.json() or []
        return list(items) if isinstance(items, list) else []

    async def validate_token(self) -> bool:
        """Check the token against the account endpoint"""
        try:
            response = await self._get_client().get(f"{self.base_url}/users/me", params=self._params())
        except (httpx.RequestError, ConfigurationError):
            return False
        return response.status_code < 400

    async def close(self):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
