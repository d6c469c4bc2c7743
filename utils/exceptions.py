"""
Custom Exceptions
Error taxonomy of the research engine
"""
from typing import Optional


class CompetitorResearchError(Exception):
    """Base class for every error raised by the research engine"""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(CompetitorResearchError):
    """Missing or invalid configuration / credential"""
    pass


class ProviderError(CompetitorResearchError):
    """An external provider failed (transport error or non-2xx response)"""

    def __init__(self, message: str, provider: str = None, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, kwargs)
        self.provider = provider
        self.status_code = status_code


class SearchProviderError(ProviderError):
    """Web search provider error"""
    pass


class AnalysisError(ProviderError):
    """Vision / content analysis error"""
    pass


class MalformedResponse(ProviderError):
    """A provider answered with items that cannot be converted"""
    pass


class JobError(CompetitorResearchError):
    """Base for remote job errors"""

    def __init__(self, message: str, job_id: Optional[str] = None, **kwargs):
        super().__init__(message, kwargs)
        self.job_id = job_id


class JobSubmissionError(JobError):
    """The job could not be started"""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code

    @property
    def transient(self) -> bool:
        """Network errors, 429 and 5xx are worth another attempt"""
        if self.status_code is None:
            return True
        return self.status_code == 429 or self.status_code >= 500


class JobFailed(JobError):
    """The job reached a failing terminal status"""

    def __init__(self, job_id: str, status: str):
        super().__init__(f"Job {job_id} finished with status {status}", job_id=job_id)
        self.status = status


class JobTimeout(JobError):
    """The job did not reach a terminal status before the deadline"""

    def __init__(self, job_id: str, timeout: float, last_status: Optional[str] = None):
        super().__init__(
            f"Timed out after {timeout:g}s waiting for job {job_id} (last status: {last_status or 'UNKNOWN'})",
            job_id=job_id,
        )
        self.timeout = timeout
        self.last_status = last_status


class ResolutionFailed(CompetitorResearchError):
    """Both the direct lookup and the search fallback failed"""

    def __init__(self, entity_key: str, direct_error: str, search_error: str):
        super().__init__(
            f"Failed to resolve '{entity_key}' with both methods "
            f"(direct lookup: {direct_error}; search fallback: {search_error})"
        )
        self.entity_key = entity_key
        self.direct_error = direct_error
        self.search_error = search_error


class ResearchCancelled(CompetitorResearchError):
    """Work was not started because the run was cancelled"""
    pass


class LLMError(CompetitorResearchError):
    """LLM call or response parsing error"""

    def __init__(self, message: str, provider: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.provider = provider
