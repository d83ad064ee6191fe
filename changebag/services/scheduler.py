"""APScheduler integration for the waitlist magic-link expiry sweep."""

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

logger = logging.getLogger(__name__)

_scheduler = BackgroundScheduler(timezone="UTC")
_JOB_ID = "expire_waitlist_links"


def init_app(app) -> None:
    """Start the scheduler and register the hourly sweep."""
    if not _scheduler.running:
        _scheduler.start()

    _scheduler.add_job(
        _run_expiry_sweep,
        trigger=CronTrigger(minute=5),
        id=_JOB_ID,
        args=[app],
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    logger.info("Waitlist expiry sweep scheduled hourly")


def _run_expiry_sweep(app) -> None:
    from changebag.services.waitlist import WaitlistService
    with app.app_context():
        try:
            WaitlistService.expire_stale_entries()
        except Exception:
            logger.exception("Waitlist expiry sweep failed")
