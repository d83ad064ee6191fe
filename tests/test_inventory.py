"""Tests for derived tote inventory."""

import pytest

from changebag.models import ClaimStatus, SponsorshipStatus
from changebag.services import InventoryService, ToteInventory


# ---------------------------------------------------------------------------
# ToteInventory
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("total,claimed,pending,available,claimable", [
    (100, 0, 0, 100, 100),
    (100, 30, 10, 70, 60),
    (10, 10, 0, 0, 0),
    (5, 8, 0, 0, 0),
    (5, 2, 9, 3, 0),
])
def test_counts_never_negative(total, claimed, pending, available, claimable):
    inventory = ToteInventory(total_totes=total, claimed_totes=claimed, pending_claims=pending)
    assert inventory.available_totes == available
    assert inventory.claimable_totes == claimable


def test_to_dict_shape():
    data = ToteInventory(total_totes=10, claimed_totes=4, pending_claims=1).to_dict()
    assert data == {"totalTotes": 10, "claimedTotes": 4, "availableTotes": 6}


# ---------------------------------------------------------------------------
# compute_inventory
# ---------------------------------------------------------------------------


def test_only_approved_sponsorships_count(ctx, cause_id, make_sponsorship):
    make_sponsorship(cause_id, tote_quantity=100, status=SponsorshipStatus.APPROVED)
    make_sponsorship(cause_id, tote_quantity=50, status=SponsorshipStatus.PENDING)
    make_sponsorship(cause_id, tote_quantity=25, status=SponsorshipStatus.REJECTED)
    make_sponsorship(cause_id, tote_quantity=40, status=SponsorshipStatus.COMPLETED)

    inventory = InventoryService.compute_inventory(cause_id)

    assert inventory.total_totes == 100
    assert inventory.claimed_totes == 0
    assert inventory.available_totes == 100


def test_claimed_counts_verified_shipped_delivered(ctx, cause_id, make_sponsorship, make_claim):
    make_sponsorship(cause_id, tote_quantity=10)
    make_claim(cause_id, "a@example.org", ClaimStatus.VERIFIED)
    make_claim(cause_id, "b@example.org", ClaimStatus.SHIPPED)
    make_claim(cause_id, "c@example.org", ClaimStatus.DELIVERED)
    make_claim(cause_id, "d@example.org", ClaimStatus.PENDING)
    make_claim(cause_id, "e@example.org", ClaimStatus.CANCELLED)

    inventory = InventoryService.compute_inventory(cause_id)

    assert inventory.claimed_totes == 3
    assert inventory.pending_claims == 1
    assert inventory.available_totes == 7
    assert inventory.claimable_totes == 6


def test_more_claims_than_totes_reports_zero(ctx, cause_id, make_sponsorship, make_claim):
    make_sponsorship(cause_id, tote_quantity=1)
    make_claim(cause_id, "a@example.org", ClaimStatus.VERIFIED)
    make_claim(cause_id, "b@example.org", ClaimStatus.DELIVERED)

    assert InventoryService.compute_inventory(cause_id).available_totes == 0


def test_cause_without_sponsorships(ctx, cause_id):
    inventory = InventoryService.compute_inventory(cause_id)
    assert inventory == ToteInventory(0, 0, 0)


def test_compute_is_idempotent(ctx, cause_id, make_sponsorship, make_claim):
    make_sponsorship(cause_id, tote_quantity=20)
    make_claim(cause_id, "a@example.org", ClaimStatus.SHIPPED)

    first = InventoryService.compute_inventory(cause_id)
    second = InventoryService.compute_inventory(cause_id)

    assert first == second


def test_batch_matches_single(ctx, make_cause, make_sponsorship, make_claim):
    first = make_cause("First")
    second = make_cause("Second")
    empty = make_cause("Empty")
    make_sponsorship(first, tote_quantity=30)
    make_sponsorship(second, tote_quantity=5)
    make_claim(first, "a@example.org", ClaimStatus.VERIFIED)
    make_claim(second, "a@example.org", ClaimStatus.PENDING)

    batch = InventoryService.compute_for_causes([first, second, empty])

    for cause_id in (first, second, empty):
        assert batch[cause_id] == InventoryService.compute_inventory(cause_id)


def test_batch_with_no_ids(ctx):
    assert InventoryService.compute_for_causes([]) == {}
