"""Job layer package for event dispatch and replay orchestration."""

from .event_decoding import EventDecodeError, job_decode_event, job_read_events_jsonl
from .event_router import EventRouter, job_router_validate_handler_table
from .interfaces import JobExecutionResult, JobOrchestratorPort
from .replay_orchestrator import EventReplayOrchestrator, EventReplayOrchestratorConfig

__all__ = [
	"EventDecodeError",
	"EventReplayOrchestrator",
	"EventReplayOrchestratorConfig",
	"EventRouter",
	"JobExecutionResult",
	"JobOrchestratorPort",
	"job_decode_event",
	"job_read_events_jsonl",
	"job_router_validate_handler_table",
]
