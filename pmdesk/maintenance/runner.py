"""Shared bootstrap for the maintenance command-line scripts."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from pmdesk.config import MissingConfigurationError, Settings, get_settings
from pmdesk.storage import BackendClient, ProjectStore

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(levelname)s  %(name)s  %(message)s",
    )
    # One INFO line per request otherwise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


async def _run(
    task: Callable[[ProjectStore], Awaitable[object]],
    client: BackendClient,
) -> None:
    async with client:
        await task(ProjectStore(client))


def run_script(
    task: Callable[[ProjectStore], Awaitable[object]],
    settings: Optional[Settings] = None,
) -> int:
    """Run *task* against a fresh store and return the process exit status.

    Missing credentials abort with status 1. Anything the task reports
    per row is only logged, so a completed run always returns 0.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    try:
        client = BackendClient.from_settings(settings)
    except MissingConfigurationError as exc:
        logger.error("%s", exc)
        return 1

    asyncio.run(_run(task, client))
    return 0
