"""Tests for the scheduled magic-link expiry sweep."""

from datetime import timedelta

from apscheduler.triggers.cron import CronTrigger

from changebag import db
from changebag.models import WaitlistEntry, WaitlistStatus
from changebag.services import WaitlistService, scheduler
from changebag.utils import utcnow


def test_init_registers_hourly_job(app, monkeypatch):
    monkeypatch.setattr(scheduler._scheduler, "start", lambda: None)

    scheduler.init_app(app)
    try:
        job = scheduler._scheduler.get_job(scheduler._JOB_ID)
        assert job is not None
        assert isinstance(job.trigger, CronTrigger)
        assert job.args == (app,)
    finally:
        scheduler._scheduler.remove_job(scheduler._JOB_ID)


def test_sweep_expires_lapsed_links(app, cause_id):
    with app.app_context():
        entry = WaitlistService.join_waitlist(cause_id, {
            "fullName": "Asha", "email": "asha@example.org", "phone": "9876500000",
        })
        WaitlistService.notify_waitlist_members(cause_id)
        entry = db.session.get(WaitlistEntry, entry.id)
        entry.magic_link_expires = utcnow() - timedelta(minutes=5)
        db.session.commit()
        entry_id = entry.id

    scheduler._run_expiry_sweep(app)

    with app.app_context():
        assert db.session.get(WaitlistEntry, entry_id).status == WaitlistStatus.EXPIRED
