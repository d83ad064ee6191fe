"""Tests for waitlist positions, magic links and expiry."""

from datetime import timedelta

import pytest

from changebag import db
from changebag.errors import ConflictError, NotFoundError, ValidationError
from changebag.models import Sponsorship, SponsorshipStatus, WaitlistEntry, WaitlistStatus
from changebag.services import SponsorshipService, WaitlistService
from changebag.services import waitlist as waitlist_service
from changebag.utils import utcnow


def _contact(name, **extra):
    contact = {
        "fullName": name.title(),
        "email": f"{name}@example.org",
        "phone": "9876500000",
    }
    contact.update(extra)
    return contact


def _join(cause_id, *names):
    return [WaitlistService.join_waitlist(cause_id, _contact(name)) for name in names]


# ---------------------------------------------------------------------------
# Joining
# ---------------------------------------------------------------------------


def test_positions_are_sequential(ctx, cause_id):
    entries = _join(cause_id, "asha", "bilal", "chen")

    assert [e.position for e in entries] == [1, 2, 3]
    assert all(e.status == WaitlistStatus.WAITING for e in entries)


def test_positions_are_per_cause(ctx, make_cause):
    first = make_cause("First")
    second = make_cause("Second")

    _join(first, "asha", "bilal")
    (entry,) = _join(second, "asha")

    assert entry.position == 1


def test_duplicate_join_does_not_consume_a_position(ctx, cause_id):
    _join(cause_id, "asha", "bilal")

    with pytest.raises(ConflictError):
        WaitlistService.join_waitlist(cause_id, _contact("asha", email="ASHA@example.org"))

    (entry,) = _join(cause_id, "chen")
    assert entry.position == 3


def test_join_validates_contact(ctx, cause_id):
    with pytest.raises(ValidationError) as exc:
        WaitlistService.join_waitlist(cause_id, {"fullName": "Asha"})
    assert exc.value.missing_fields == ["email", "phone"]

    with pytest.raises(ValidationError) as exc:
        WaitlistService.join_waitlist(cause_id, _contact("asha", email="nope", phone="12"))
    assert set(exc.value.invalid_fields) == {"email", "phone"}


def test_join_unknown_cause(ctx):
    with pytest.raises(NotFoundError):
        WaitlistService.join_waitlist(9999, _contact("asha"))


# ---------------------------------------------------------------------------
# Notification
# ---------------------------------------------------------------------------


def test_notify_issues_distinct_links(ctx, cause_id, outbox):
    _join(cause_id, "asha", "bilal", "chen")

    notified = WaitlistService.notify_waitlist_members(cause_id)

    entries = WaitlistService.list_for_cause(cause_id)
    tokens = {e.magic_link_token for e in entries}
    assert notified == 3
    assert len(tokens) == 3
    assert all(len(token) == 64 for token in tokens)
    for entry in entries:
        assert entry.status == WaitlistStatus.NOTIFIED
        assert entry.magic_link_expires - entry.magic_link_sent_at == timedelta(hours=48)
    assert [m["to"] for m in outbox] == ["asha@example.org", "bilal@example.org", "chen@example.org"]
    assert f"/claim-tote/{cause_id}?token=" in outbox[0]["html"]


def test_notify_continues_past_a_failed_entry(ctx, cause_id, outbox, monkeypatch):
    _join(cause_id, "asha", "bilal", "chen")
    real_new_token = waitlist_service._new_token
    calls = []

    def flaky_token():
        calls.append(1)
        if len(calls) == 2:
            raise RuntimeError("token source unavailable")
        return real_new_token()

    monkeypatch.setattr(waitlist_service, "_new_token", flaky_token)

    assert WaitlistService.notify_waitlist_members(cause_id) == 2

    db.session.expire_all()
    statuses = {e.email: e.status for e in WaitlistService.list_for_cause(cause_id)}
    assert statuses == {
        "asha@example.org": WaitlistStatus.NOTIFIED,
        "bilal@example.org": WaitlistStatus.WAITING,
        "chen@example.org": WaitlistStatus.NOTIFIED,
    }
    assert [m["to"] for m in outbox] == ["asha@example.org", "chen@example.org"]


def test_notify_skips_entries_not_waiting(ctx, cause_id):
    asha, bilal = _join(cause_id, "asha", "bilal")
    asha.status = WaitlistStatus.CLAIMED
    db.session.commit()

    assert WaitlistService.notify_waitlist_members(cause_id) == 1
    assert db.session.get(WaitlistEntry, asha.id).magic_link_token is None


def test_email_opt_out_still_notified(ctx, cause_id, outbox):
    WaitlistService.join_waitlist(cause_id, _contact("asha", notifyEmail=False))

    assert WaitlistService.notify_waitlist_members(cause_id) == 1
    assert outbox == []


def test_approval_notifies_within_link_window(ctx, cause_id, admin_id, make_sponsorship):
    _join(cause_id, "asha", "bilal", "chen")
    sponsorship_id = make_sponsorship(cause_id, status=SponsorshipStatus.PENDING)

    SponsorshipService.approve_sponsorship(sponsorship_id, admin_id)

    approved_at = db.session.get(Sponsorship, sponsorship_id).approved_at
    for entry in WaitlistService.list_for_cause(cause_id):
        assert entry.status == WaitlistStatus.NOTIFIED
        assert entry.magic_link_sent_at - approved_at < timedelta(seconds=5)
        assert entry.magic_link_expires == entry.magic_link_sent_at + timedelta(hours=48)


# ---------------------------------------------------------------------------
# Magic link validation
# ---------------------------------------------------------------------------


def test_validate_magic_link(ctx, cause_id):
    (entry,) = _join(cause_id, "asha")
    WaitlistService.notify_waitlist_members(cause_id)
    db.session.refresh(entry)

    assert WaitlistService.validate_magic_link(entry.magic_link_token).id == entry.id


@pytest.mark.parametrize("token", [None, "", "0" * 64])
def test_unknown_magic_link(ctx, token):
    with pytest.raises(ConflictError) as exc:
        WaitlistService.validate_magic_link(token)
    assert exc.value.message == "Invalid or expired magic link"


def test_expired_magic_link(ctx, cause_id):
    (entry,) = _join(cause_id, "asha")
    WaitlistService.notify_waitlist_members(cause_id)
    db.session.refresh(entry)
    entry.magic_link_expires = utcnow() - timedelta(seconds=1)
    db.session.commit()

    with pytest.raises(ConflictError):
        WaitlistService.validate_magic_link(entry.magic_link_token)


def test_claimed_entry_link_is_spent(ctx, cause_id):
    (entry,) = _join(cause_id, "asha")
    WaitlistService.notify_waitlist_members(cause_id)
    db.session.refresh(entry)
    WaitlistService.mark_waitlist_as_claimed(entry.id)

    with pytest.raises(ConflictError):
        WaitlistService.validate_magic_link(entry.magic_link_token)


# ---------------------------------------------------------------------------
# Resend and expiry
# ---------------------------------------------------------------------------


def test_resend_issues_fresh_link(ctx, cause_id, outbox):
    (entry,) = _join(cause_id, "asha")
    WaitlistService.notify_waitlist_members(cause_id)
    db.session.refresh(entry)
    old_token = entry.magic_link_token

    entry = WaitlistService.resend_notification(entry.id)

    assert entry.magic_link_token != old_token
    assert outbox[-1]["subject"].startswith("Reminder:")
    with pytest.raises(ConflictError):
        WaitlistService.validate_magic_link(old_token)


def test_resend_revives_link_lapsed_by_sweep(ctx, cause_id, outbox):
    (entry,) = _join(cause_id, "asha")
    WaitlistService.notify_waitlist_members(cause_id)
    WaitlistService.expire_stale_entries(now=utcnow() + timedelta(hours=49))
    db.session.expire_all()
    assert db.session.get(WaitlistEntry, entry.id).status == WaitlistStatus.EXPIRED

    entry = WaitlistService.resend_notification(entry.id)

    assert entry.status == WaitlistStatus.NOTIFIED
    assert entry.magic_link_expires > utcnow()
    assert WaitlistService.validate_magic_link(entry.magic_link_token).id == entry.id
    assert outbox[-1]["subject"].startswith("Reminder:")


def test_resend_requires_notified(ctx, cause_id):
    (entry,) = _join(cause_id, "asha")
    with pytest.raises(ConflictError) as exc:
        WaitlistService.resend_notification(entry.id)
    assert exc.value.current_status == WaitlistStatus.WAITING


def test_expire_stale_entries(ctx, cause_id):
    asha, bilal = _join(cause_id, "asha", "bilal")
    WaitlistService.notify_waitlist_members(cause_id)
    waiting = _join(cause_id, "chen")[0]

    later = utcnow() + timedelta(hours=49)
    assert WaitlistService.expire_stale_entries(now=later) == 2

    db.session.expire_all()
    assert db.session.get(WaitlistEntry, asha.id).status == WaitlistStatus.EXPIRED
    assert db.session.get(WaitlistEntry, bilal.id).status == WaitlistStatus.EXPIRED
    assert db.session.get(WaitlistEntry, waiting.id).status == WaitlistStatus.WAITING


def test_expire_leaves_live_links(ctx, cause_id):
    _join(cause_id, "asha")
    WaitlistService.notify_waitlist_members(cause_id)

    assert WaitlistService.expire_stale_entries() == 0


def test_list_for_email(ctx, make_cause):
    first = make_cause("First")
    second = make_cause("Second")
    _join(first, "asha")
    _join(second, "asha", "bilal")

    entries = WaitlistService.list_for_email("Asha@Example.org")

    assert {e.cause_id for e in entries} == {first, second}
