"""Main module entrypoint for local runtime execution.

`api` serves the read API; `replay` applies a JSON-lines event file.
"""

import argparse
import logging
from pathlib import Path

import uvicorn

from hook_indexer.bootstrap import bootstrap_create_application, bootstrap_create_replay_orchestrator
from hook_indexer.config import config_load_settings

logger = logging.getLogger(__name__)


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with status 1 when a replay does not succeed.
    """

    argument_parser = argparse.ArgumentParser(description="Lending hook indexer runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "replay"),
        help="Runtime command: `api` starts server, `replay` applies one events file",
        type=str,
    )
    argument_parser.add_argument(
        "--events-file",
        dest="events_file",
        type=Path,
        help="JSON-lines events file for `replay`",
    )
    argument_parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Apply `replay` events to an in-memory store and discard the result",
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if parsed_arguments.command == "replay":
        if parsed_arguments.events_file is None:
            argument_parser.error("`replay` requires --events-file")
        replay_orchestrator = bootstrap_create_replay_orchestrator(
            events_file_path=parsed_arguments.events_file,
            dry_run=parsed_arguments.dry_run,
        )
        execution_result = replay_orchestrator.job_execute(job_name="event_replay")
        print(
            f"{execution_result.job_name}: status={execution_result.status} "
            f"applied={execution_result.applied_event_count} skipped={execution_result.skipped_event_count}"
        )
        if execution_result.status != "success":
            raise SystemExit(1)
        return

    application = bootstrap_create_application()
    logger.info("starting api host=%s port=%s", settings.application_host, settings.application_port)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


if __name__ == "__main__":
    main()
