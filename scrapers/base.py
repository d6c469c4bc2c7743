"""
Base Job Client
Adapter interface for providers that execute long-running remote jobs
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List
import logging

from models import Job, JobSpec


logger = logging.getLogger(__name__)


class BaseJobClient(ABC):
    """
    Submit / poll / fetch adapter.

    Implementations translate the three protocol steps into provider calls and
    normalize the provider's job record into a Job. They do not loop or wait;
    that is the JobRunner's job.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name used in logs"""
        pass

    @abstractmethod
    async def submit(self, spec: JobSpec) -> Job:
        """
        Start a remote job

        Raises:
            JobSubmissionError: non-success response or network error
        """
        pass

    @abstractmethod
    async def poll(self, job_id: str) -> Job:
        """
        Read the current job record

        Raises:
            ProviderError: transport error or non-2xx response
        """
        pass

    @abstractmethod
    async def fetch_results(self, job: Job) -> List[Dict[str, Any]]:
        """Fetch the result collection of a succeeded job (may be empty)"""
        pass

    def is_configured(self) -> bool:
        return True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Release resources"""
        return None
