# src/kanban_sync/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks.task_api import ApiError
from ..tasks.task_models import TaskValidationError

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _print_failure(state: AppState, err: Exception) -> None:
    """Render a failed command from the error signal, then acknowledge it."""
    if state.errors.active:
        _print_ts(f"[ERROR] {state.errors.message}: {state.errors.details}")
        state.errors.clear()
    else:
        _print_ts(f"[ERROR] {err}")


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (backend=%s).", getattr(state.settings, "api_base_url", "?"))
    _print_ts("[CONSOLE] Use /help for commands, /load to fetch the board, /exit to quit.\n")

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            _print_ts("Commands start with '/'. Use /help to list available commands.")
            continue

        try:
            response = await command_registry.handle(state, user_input)
        except (TaskValidationError, ApiError) as e:
            _print_failure(state, e)
            continue
        except Exception:
            logger.exception("Command handler crashed.")
            _print_ts("Internal error while handling a command.")
            continue

        if response is not None:
            print(f"[{_ts_local()}] {response}")

    logger.info("Console connector finished.")
