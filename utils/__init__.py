"""
Utils Module
Logging and error taxonomy
"""
from .logger import setup_logger, get_pipeline_logger, console
from .exceptions import (
    CompetitorResearchError,
    ConfigurationError,
    ProviderError,
    SearchProviderError,
    AnalysisError,
    MalformedResponse,
    JobError,
    JobSubmissionError,
    JobFailed,
    JobTimeout,
    ResolutionFailed,
    ResearchCancelled,
    LLMError,
)

__all__ = [
    "setup_logger",
    "get_pipeline_logger",
    "console",
    "CompetitorResearchError",
    "ConfigurationError",
    "ProviderError",
    "SearchProviderError",
    "AnalysisError",
    "MalformedResponse",
    "JobError",
    "JobSubmissionError",
    "JobFailed",
    "JobTimeout",
    "ResolutionFailed",
    "ResearchCancelled",
    "LLMError",
]
