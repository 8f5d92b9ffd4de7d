"""Job-layer orchestrator replaying a JSON-lines event file through the router."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .event_decoding import job_read_events_jsonl
from .event_router import EventRouter
from .interfaces import JobExecutionResult, JobOrchestratorPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventReplayOrchestratorConfig:
    """Configuration values for event replay.

    Attributes:
        events_file_path: JSON-lines file of decoded events in chain order.
        progress_log_interval: Log progress after this many events.
    """

    events_file_path: Path
    progress_log_interval: int = 1000


class EventReplayOrchestrator(JobOrchestratorPort):
    """Apply every event of one file, in file order, through the event router."""

    _REPLAY_JOB_NAME = "event_replay"

    def __init__(self, router: EventRouter, config: EventReplayOrchestratorConfig):
        """Initialize replay dependencies.

        Args:
            router: Event router applying events to the ledger.
            config: Replay configuration values.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if router is None:
            raise ValueError("router must not be None")
        if config.progress_log_interval < 1:
            raise ValueError("config.progress_log_interval must be >= 1")

        self._router = router
        self._config = config

    def job_supported_names(self) -> tuple[str, ...]:
        """Return supported job names.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return (self._REPLAY_JOB_NAME,)

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Replay the configured events file.

        Args:
            job_name: Name of job to execute.

        Returns:
            JobExecutionResult: Final status with applied and skipped counts.

        Raises:
            ValueError: Raised when job name is unsupported.
            EventDecodeError: Raised when a line cannot be decoded; earlier lines stay applied.
            OSError: Raised when the events file cannot be read.
        """

        normalized_job_name = job_name.strip()
        if normalized_job_name != self._REPLAY_JOB_NAME:
            raise ValueError(f"unsupported job_name={normalized_job_name}")

        applied_event_count = 0
        skipped_event_count = 0
        logger.info("replay started events_file=%s", self._config.events_file_path)
        for event in job_read_events_jsonl(self._config.events_file_path):
            if self._router.job_router_dispatch(event):
                applied_event_count += 1
            else:
                skipped_event_count += 1
            processed_event_count = applied_event_count + skipped_event_count
            if processed_event_count % self._config.progress_log_interval == 0:
                logger.info(
                    "replay progress processed=%s applied=%s skipped=%s",
                    processed_event_count,
                    applied_event_count,
                    skipped_event_count,
                )

        logger.info("replay completed applied=%s skipped=%s", applied_event_count, skipped_event_count)
        return JobExecutionResult(
            job_name=self._REPLAY_JOB_NAME,
            status="success",
            applied_event_count=applied_event_count,
            skipped_event_count=skipped_event_count,
        )
