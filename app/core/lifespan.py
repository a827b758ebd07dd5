import contextlib
from contextlib import asynccontextmanager
import asyncio
import logging

from app.core.config.heuristics import get_heuristics
from app.services.critique_service import clear_sessions, purge_expired_sessions

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    get_heuristics()

    stop_event = asyncio.Event()

    async def periodic_purge() -> None:
        while not stop_event.is_set():
            try:
                deleted = purge_expired_sessions()
                if deleted:
                    logger.info("critique_session_purge deleted=%s", deleted)
            except Exception as exc:  # pragma: no cover
                logger.warning("critique_session_purge_failed: %s", exc)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=300)
            except asyncio.TimeoutError:
                continue

    purge_task = asyncio.create_task(periodic_purge())
    yield
    stop_event.set()
    if not purge_task.done():
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
    clear_sessions()
