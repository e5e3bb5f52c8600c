from contextlib import asynccontextmanager
import logging

from hiring_compass.core.config import settings
from hiring_compass.core.history_store import SqliteHistoryRepository, get_history_repository

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    repository = get_history_repository()
    logger.info(
        "startup history_backend=%s market_pulse_enabled=%s analyze_timeout_s=%s",
        settings.history_backend,
        settings.market_pulse_enabled,
        settings.analyze_timeout_s,
    )
    yield
    if isinstance(repository, SqliteHistoryRepository):
        repository.close()
    logger.info("shutdown complete")
