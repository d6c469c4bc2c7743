"""
Status Tracker
Single writer of a run's PipelineStatus, pushing every change to one observer
"""
from datetime import datetime
from typing import Callable, Optional
import logging

from models import LogEntry, LogLevel, PhaseState, PipelinePhase, PipelineStatus
from utils.logger import get_pipeline_logger


logger = logging.getLogger(__name__)

StatusObserver = Callable[[PipelineStatus], None]

_LOG_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.SUCCESS: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class StatusTracker:
    """
    Owns the PipelineStatus of the current run.

    The observer receives the live status object after each mutation and
    must treat it as read-only.
    """

    def __init__(self, observer: Optional[StatusObserver] = None):
        self._observer = observer
        self._status = PipelineStatus()
        self._run_log = get_pipeline_logger()

    @property
    def status(self) -> PipelineStatus:
        return self._status

    def reset(self) -> PipelineStatus:
        self._status = PipelineStatus()
        return self._status

    def _notify(self):
        if self._observer is None:
            return
        try:
            self._observer(self._status)
        except Exception as e:
            logger.warning(f"Status observer raised: {e}")

    def set_phase(self, phase: PipelinePhase, progress: Optional[float] = None):
        self._status.current_phase = phase
        if progress is not None:
            self._status.progress = progress
        self._notify()

    def update_phase(
        self,
        phase: PipelinePhase,
        state: Optional[PhaseState] = None,
        progress: Optional[float] = None,
        message: Optional[str] = None,
    ):
        sub_status = self._status.phases[phase]
        if state is not None:
            sub_status.status = state
        if progress is not None:
            sub_status.progress = min(max(progress, 0.0), 100.0)
        if message is not None:
            sub_status.message = message
        self._notify()

    def log(self, message: str, level: LogLevel = LogLevel.INFO):
        self._status.logs.append(LogEntry(message=message, type=level))
        self._run_log.log(_LOG_LEVELS[level], message)
        self._notify()

    def cancel(self, message: str):
        self._status.cancelled = True
        self._status.current_phase = PipelinePhase.IDLE
        self.log(message, LogLevel.WARNING)

    def fail(self, error: str):
        self._status.error = error
        self._status.end_time = datetime.now()
        self.log(f"Research failed: {error}", LogLevel.ERROR)

    def finish(self):
        self._status.current_phase = PipelinePhase.IDLE
        self._status.end_time = datetime.now()
        if not self._status.cancelled:
            self._status.progress = 100.0
        self._notify()
