# src/kanban_sync/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, loads the board once, then runs the console REPL.
"""

from __future__ import annotations

import asyncio
import logging

from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..tasks.task_api import ApiError
from .bootstrap import create_initial_state, shutdown

logger = logging.getLogger(__name__)


async def _run(state: AppState) -> None:
    try:
        try:
            await state.store.fetch_tasks()
        except ApiError:
            # The error signal keeps the details; /status and /error show them.
            logger.warning("Initial load failed; use /load to retry.")
        await run_console_loop(state)
    finally:
        await shutdown(state)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (backend=%s)...", settings.app_name, settings.api_base_url)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    try:
        asyncio.run(_run(state))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
