"""Tests for claim creation, fulfilment status and queries."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from changebag import db
from changebag.errors import ConflictError, NotFoundError, ValidationError
from changebag.models import (
    Claim,
    ClaimSource,
    ClaimStatus,
    SponsorshipStatus,
    WaitlistEntry,
    WaitlistStatus,
)
from changebag.services import ClaimService, WaitlistService
from changebag.services.claims import ALREADY_CLAIMED, NO_TOTES
from changebag.utils import utcnow


def _claim_data(cause_id, email="ravi@example.org", **extra):
    data = {"causeId": cause_id, "fullName": "Ravi Kumar", "email": email, "city": "Pune"}
    data.update(extra)
    return data


@pytest.fixture
def stocked_cause(cause_id, make_sponsorship):
    """A cause with ten approved totes."""
    make_sponsorship(cause_id, tote_quantity=10)
    return cause_id


# ---------------------------------------------------------------------------
# create_claim
# ---------------------------------------------------------------------------


def test_create_claim(ctx, stocked_cause):
    claim = ClaimService.create_claim(_claim_data(stocked_cause, "  Ravi@Example.org "))

    assert claim.status == ClaimStatus.PENDING
    assert claim.email == "ravi@example.org"
    assert claim.email_verified is False
    assert claim.source == ClaimSource.DIRECT
    assert claim.cause_title == "Clean Beaches"


def test_unknown_source_falls_back_to_direct(ctx, stocked_cause):
    claim = ClaimService.create_claim(_claim_data(stocked_cause, source="carrier-pigeon"))
    assert claim.source == ClaimSource.DIRECT


def test_qr_source_marks_scan(ctx, stocked_cause):
    claim = ClaimService.create_claim(_claim_data(stocked_cause, source=ClaimSource.QR_CODE))
    assert claim.qr_code_scanned is True


def test_missing_fields(ctx):
    with pytest.raises(ValidationError) as exc:
        ClaimService.create_claim({"email": "ravi@example.org"})
    assert exc.value.missing_fields == ["causeId", "fullName"]


def test_unknown_cause(ctx):
    with pytest.raises(NotFoundError):
        ClaimService.create_claim(_claim_data(9999))


def test_duplicate_claim_is_rejected(ctx, stocked_cause):
    ClaimService.create_claim(_claim_data(stocked_cause))

    with pytest.raises(ConflictError) as exc:
        ClaimService.create_claim(_claim_data(stocked_cause, "RAVI@example.org"))

    assert exc.value.message == ALREADY_CLAIMED
    assert Claim.query.filter_by(cause_id=stocked_cause).count() == 1


def test_same_email_may_claim_other_causes(ctx, make_cause, make_sponsorship):
    first = make_cause("First")
    second = make_cause("Second")
    make_sponsorship(first, tote_quantity=1)
    make_sponsorship(second, tote_quantity=1)

    ClaimService.create_claim(_claim_data(first))
    ClaimService.create_claim(_claim_data(second))

    assert Claim.query.filter_by(email="ravi@example.org").count() == 2


def test_database_rejects_duplicate_pair(ctx, stocked_cause, make_claim):
    make_claim(stocked_cause, "ravi@example.org")
    db.session.add(Claim(cause_id=stocked_cause, full_name="Again", email="ravi@example.org"))

    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()


def test_no_totes_without_approved_sponsorship(ctx, cause_id, make_sponsorship):
    make_sponsorship(cause_id, tote_quantity=100, status=SponsorshipStatus.PENDING)

    with pytest.raises(ConflictError) as exc:
        ClaimService.create_claim(_claim_data(cause_id))

    assert exc.value.message == NO_TOTES


def test_last_tote_goes_to_first_claimant(ctx, cause_id, make_sponsorship):
    make_sponsorship(cause_id, tote_quantity=1)

    ClaimService.create_claim(_claim_data(cause_id, "first@example.org"))
    with pytest.raises(ConflictError) as exc:
        ClaimService.create_claim(_claim_data(cause_id, "second@example.org"))

    assert exc.value.message == NO_TOTES
    assert Claim.query.filter_by(cause_id=cause_id).count() == 1


def test_cancelled_claims_free_their_tote(ctx, cause_id, make_sponsorship, make_claim):
    make_sponsorship(cause_id, tote_quantity=1)
    make_claim(cause_id, "gone@example.org", ClaimStatus.CANCELLED)

    claim = ClaimService.create_claim(_claim_data(cause_id))

    assert claim.id is not None


def test_check_existing_claim(ctx, stocked_cause, make_claim):
    claim_id = make_claim(stocked_cause, "ravi@example.org")

    assert ClaimService.check_existing_claim("Ravi@Example.org", stocked_cause).id == claim_id
    assert ClaimService.check_existing_claim("other@example.org", stocked_cause) is None


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------


def test_shipping_and_delivery_dates(ctx, stocked_cause, make_claim):
    claim_id = make_claim(stocked_cause, status=ClaimStatus.VERIFIED)

    claim = ClaimService.update_claim_status(claim_id, ClaimStatus.SHIPPED, {
        "trackingNumber": "TRK123",
        "carrier": "IndiaPost",
        "estimatedDelivery": "2026-11-20",
    })
    assert claim.shipping_date is not None
    assert claim.delivery_date is None
    assert claim.tracking_number == "TRK123"
    assert claim.estimated_delivery.isoformat() == "2026-11-20"

    claim = ClaimService.update_claim_status(claim_id, ClaimStatus.DELIVERED)
    assert claim.delivery_date is not None
    assert claim.delivery_date >= claim.shipping_date


def test_forward_skips_are_allowed(ctx, stocked_cause, make_claim):
    claim_id = make_claim(stocked_cause)
    claim = ClaimService.update_claim_status(claim_id, ClaimStatus.SHIPPED)
    assert claim.status == ClaimStatus.SHIPPED


@pytest.mark.parametrize("current,target", [
    (ClaimStatus.SHIPPED, ClaimStatus.VERIFIED),
    (ClaimStatus.VERIFIED, ClaimStatus.PENDING),
    (ClaimStatus.VERIFIED, ClaimStatus.VERIFIED),
    (ClaimStatus.DELIVERED, ClaimStatus.CANCELLED),
    (ClaimStatus.CANCELLED, ClaimStatus.PENDING),
])
def test_illegal_transitions(ctx, stocked_cause, make_claim, current, target):
    claim_id = make_claim(stocked_cause, status=current)

    with pytest.raises(ConflictError) as exc:
        ClaimService.update_claim_status(claim_id, target)

    assert exc.value.current_status == current
    assert db.session.get(Claim, claim_id).status == current


@pytest.mark.parametrize("current", [
    ClaimStatus.PENDING,
    ClaimStatus.VERIFIED,
    ClaimStatus.SHIPPED,
])
def test_non_terminal_claims_can_be_cancelled(ctx, stocked_cause, make_claim, current):
    claim_id = make_claim(stocked_cause, status=current)
    claim = ClaimService.update_claim_status(claim_id, ClaimStatus.CANCELLED)
    assert claim.status == ClaimStatus.CANCELLED


def test_unknown_status(ctx, stocked_cause, make_claim):
    claim_id = make_claim(stocked_cause)
    with pytest.raises(ValidationError):
        ClaimService.update_claim_status(claim_id, "lost")


def test_verify_qr_claim(ctx, stocked_cause, make_claim):
    claim_id = make_claim(stocked_cause, source=ClaimSource.QR_CODE, qr_code_scanned=True)

    claim = ClaimService.verify_qr_code_claim(claim_id)

    assert claim.status == ClaimStatus.VERIFIED
    assert claim.email_verified is True


def test_verify_qr_rejects_direct_claims(ctx, stocked_cause, make_claim):
    claim_id = make_claim(stocked_cause)
    with pytest.raises(ConflictError):
        ClaimService.verify_qr_code_claim(claim_id)


# ---------------------------------------------------------------------------
# Magic-link claims
# ---------------------------------------------------------------------------


def _notified_entry(cause_id, email="priya@example.org"):
    entry = WaitlistService.join_waitlist(cause_id, {
        "fullName": "Priya Shah", "email": email, "phone": "9876500001",
    })
    WaitlistService.notify_waitlist_members(cause_id)
    db.session.refresh(entry)
    return entry


def test_magic_link_claim_marks_entry_claimed(ctx, stocked_cause):
    entry = _notified_entry(stocked_cause)

    claim = ClaimService.create_claim_from_magic_link(entry.magic_link_token, {"city": "Pune"})

    assert claim.source == ClaimSource.MAGIC_LINK
    assert claim.email == "priya@example.org"
    assert claim.full_name == "Priya Shah"
    db.session.expire_all()
    assert db.session.get(WaitlistEntry, entry.id).status == WaitlistStatus.CLAIMED


def test_magic_link_claim_is_all_or_nothing(ctx, stocked_cause, make_claim):
    entry = _notified_entry(stocked_cause)
    make_claim(stocked_cause, "priya@example.org")

    with pytest.raises(ConflictError):
        ClaimService.create_claim_from_magic_link(entry.magic_link_token, {})

    db.session.expire_all()
    assert db.session.get(WaitlistEntry, entry.id).status == WaitlistStatus.NOTIFIED


def test_expired_magic_link_cannot_claim(ctx, stocked_cause):
    entry = _notified_entry(stocked_cause)
    entry.magic_link_expires = utcnow() - timedelta(minutes=1)
    db.session.commit()

    with pytest.raises(ConflictError):
        ClaimService.create_claim_from_magic_link(entry.magic_link_token, {})
    assert Claim.query.count() == 0


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def test_list_claims_newest_first(ctx, stocked_cause, make_claim):
    ids = [make_claim(stocked_cause, f"c{i}@example.org") for i in range(3)]

    first_page, pagination = ClaimService.list_claims(page=1, limit=2)
    second_page, _ = ClaimService.list_claims(page=2, limit=2)

    assert pagination == {"total": 3, "page": 1, "pages": 2}
    assert [c.id for c in first_page] == [ids[2], ids[1]]
    assert [c.id for c in second_page] == [ids[0]]


def test_list_claims_filters(ctx, stocked_cause, make_claim):
    make_claim(stocked_cause, "a@example.org", source=ClaimSource.QR_CODE)
    make_claim(stocked_cause, "b@example.org", status=ClaimStatus.SHIPPED)

    qr, _ = ClaimService.list_claims(source=ClaimSource.QR_CODE)
    shipped, _ = ClaimService.list_claims(status=ClaimStatus.SHIPPED)

    assert [c.email for c in qr] == ["a@example.org"]
    assert [c.email for c in shipped] == ["b@example.org"]


def test_claims_stats(ctx, stocked_cause, make_claim):
    make_claim(stocked_cause, "a@example.org")
    make_claim(stocked_cause, "b@example.org", status=ClaimStatus.DELIVERED)

    stats = ClaimService.claims_stats()

    assert stats["total"] == 2
    assert stats["byStatus"][ClaimStatus.PENDING] == 1
    assert stats["byStatus"][ClaimStatus.DELIVERED] == 1
    assert stats["byStatus"][ClaimStatus.CANCELLED] == 0
    assert stats["today"] == 2


def test_claimer_dashboard(ctx, stocked_cause, make_cause, make_claim):
    other = make_cause("Other")
    make_claim(stocked_cause, "ravi@example.org", status=ClaimStatus.SHIPPED)
    WaitlistService.join_waitlist(other, {
        "fullName": "Ravi", "email": "ravi@example.org", "phone": "9876500003",
    })

    dashboard = ClaimService.claimer_dashboard("Ravi@Example.org")

    assert dashboard["stats"]["totalClaims"] == 1
    assert dashboard["stats"]["byStatus"][ClaimStatus.SHIPPED] == 1
    assert dashboard["stats"]["waitlistEntries"] == 1
    assert dashboard["waitlist"][0]["causeId"] == other
