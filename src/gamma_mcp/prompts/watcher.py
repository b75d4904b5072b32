import asyncio
import logging
from pathlib import Path

from watchfiles import Change, awatch

from gamma_mcp.prompts.registry import PromptRegistry

logger = logging.getLogger(__name__)


def prompt_file_filter(change: Change, path: str) -> bool:
    return path.endswith(".json")


async def watch_prompt_dirs(
    registry: PromptRegistry,
    debounce_ms: int = 500,
    stop_event: asyncio.Event | None = None,
) -> None:
    """Reload ``registry`` whenever a prompt file changes; bursts within ``debounce_ms`` reload once.

    Runs until cancelled or until ``stop_event`` is set.
    """
    directories = [str(directory) for directory in registry.directories if Path(directory).is_dir()]
    if not directories:
        logger.info("prompts.watch.skipped reason=no_directories")
        return

    logger.info("prompts.watch.started directories=%s debounce_ms=%d", directories, debounce_ms)
    async for changes in awatch(
        *directories,
        watch_filter=prompt_file_filter,
        debounce=debounce_ms,
        stop_event=stop_event,
    ):
        changed = sorted({Path(path).name for _, path in changes})
        logger.info("prompts.changed files=%s", changed)
        try:
            registry.reload()
        except Exception:
            logger.exception("prompts.reload_failed files=%s", changed)
    logger.info("prompts.watch.stopped")
