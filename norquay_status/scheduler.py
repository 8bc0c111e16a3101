from __future__ import annotations

from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from norquay_status.config import SchedulerConfig
from norquay_status.logging import get_logger

logger = get_logger(__name__)


def build_scheduler(job: Callable[[], object], config: SchedulerConfig) -> Optional[AsyncIOScheduler]:
    """Schedule the overlay refresh cycle, or return None when disabled."""
    if not config.enabled:
        logger.info("scheduler.disabled")
        return None

    scheduler = AsyncIOScheduler(timezone="UTC")
    trigger = CronTrigger.from_crontab(config.cron, timezone="UTC")
    scheduler.add_job(job, trigger=trigger, id="refresh-overlay", max_instances=1, coalesce=True)
    logger.info("scheduler.configured", cron=config.cron)
    return scheduler
