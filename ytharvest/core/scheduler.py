
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from ytharvest.core.config_file import build_request, load_config
from ytharvest.core.settings import settings
from ytharvest.services.pipeline import run_search
import logging

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()

async def run_configured_search():
    request = build_request(load_config())
    if not request.search_name:
        logger.warning("Scheduled run skipped: no searchName in config file")
        return
    try:
        totals = await run_search(request)
        logger.info(f"Scheduled run for {request.search_name} finished, total: {totals.total}")
    except Exception as e:
        logger.error(f"Scheduled run for {request.search_name} failed: {e}", exc_info=True)

def start_scheduler():
    scheduler.add_job(
        run_configured_search,
        CronTrigger.from_crontab(settings.schedule_cron, timezone=settings.schedule_timezone),
        id='run_configured_search',
        name=f'Re-run configured search ({settings.schedule_cron} {settings.schedule_timezone})',
        replace_existing=True,
        max_instances=1,
    )

    scheduler.start()
    logger.info(f"Scheduler started: configured search runs on '{settings.schedule_cron}' {settings.schedule_timezone}")

def shutdown_scheduler():
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler shutdown")
