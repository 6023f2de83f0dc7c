
import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager
from ytharvest.core.settings import settings
from ytharvest.core.logging import setup_logging
from ytharvest.api.endpoints import health as health_ep
from ytharvest.api.endpoints import fetch as fetch_ep

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    from ytharvest.core.database import create_tables
    from ytharvest.core.scheduler import start_scheduler, shutdown_scheduler

    logger.info("Creating database tables...")
    await create_tables()
    logger.info("Database tables created.")

    if settings.schedule_enabled:
        start_scheduler()

    yield

    shutdown_scheduler()

app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.include_router(health_ep.router)
app.include_router(fetch_ep.router)
