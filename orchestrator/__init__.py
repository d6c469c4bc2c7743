"""
Orchestrator Module
Research pipeline controller, status tracking and cancellation
"""
from .cancellation import CancellationToken
from .status import StatusObserver, StatusTracker
from .pipeline import ResearchPipeline, execute_research

__all__ = [
    "CancellationToken",
    "StatusObserver",
    "StatusTracker",
    "ResearchPipeline",
    "execute_research",
]
