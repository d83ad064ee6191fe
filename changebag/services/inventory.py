from dataclasses import dataclass

from sqlalchemy import func

from changebag import db
from changebag.models import Claim, ClaimStatus, Sponsorship, SponsorshipStatus


@dataclass(frozen=True)
class ToteInventory:
    """Tote counts for one cause, derived from sponsorships and claims."""

    total_totes: int = 0
    claimed_totes: int = 0
    pending_claims: int = 0

    @property
    def available_totes(self) -> int:
        return max(0, self.total_totes - self.claimed_totes)

    @property
    def claimable_totes(self) -> int:
        """Totes not yet spoken for by a verified or pending claim."""
        return max(0, self.total_totes - self.claimed_totes - self.pending_claims)

    def to_dict(self) -> dict:
        return {
            "totalTotes": self.total_totes,
            "claimedTotes": self.claimed_totes,
            "availableTotes": self.available_totes,
        }


class InventoryService:
    """Derives tote inventory on read. Nothing here writes."""

    @staticmethod
    def compute_inventory(cause_id: int) -> ToteInventory:
        total = db.session.query(
            func.coalesce(func.sum(Sponsorship.tote_quantity), 0)
        ).filter(
            Sponsorship.cause_id == cause_id,
            Sponsorship.status == SponsorshipStatus.APPROVED,
        ).scalar()

        rows = db.session.query(Claim.status, func.count(Claim.id)).filter(
            Claim.cause_id == cause_id,
            Claim.status.in_(ClaimStatus.CONSUMING + [ClaimStatus.PENDING]),
        ).group_by(Claim.status).all()
        counts = dict(rows)

        claimed = sum(counts.get(status, 0) for status in ClaimStatus.CONSUMING)
        return ToteInventory(
            total_totes=int(total or 0),
            claimed_totes=int(claimed),
            pending_claims=int(counts.get(ClaimStatus.PENDING, 0)),
        )

    @staticmethod
    def compute_for_causes(cause_ids: list[int]) -> dict[int, ToteInventory]:
        """Inventory for many causes in two queries (listing pages)."""
        if not cause_ids:
            return {}

        totals = dict(
            db.session.query(Sponsorship.cause_id, func.sum(Sponsorship.tote_quantity))
            .filter(
                Sponsorship.cause_id.in_(cause_ids),
                Sponsorship.status == SponsorshipStatus.APPROVED,
            )
            .group_by(Sponsorship.cause_id)
            .all()
        )

        claimed = {}
        pending = {}
        rows = (
            db.session.query(Claim.cause_id, Claim.status, func.count(Claim.id))
            .filter(
                Claim.cause_id.in_(cause_ids),
                Claim.status.in_(ClaimStatus.CONSUMING + [ClaimStatus.PENDING]),
            )
            .group_by(Claim.cause_id, Claim.status)
            .all()
        )
        for cause_id, status, count in rows:
            if status == ClaimStatus.PENDING:
                pending[cause_id] = pending.get(cause_id, 0) + count
            else:
                claimed[cause_id] = claimed.get(cause_id, 0) + count

        return {
            cause_id: ToteInventory(
                total_totes=int(totals.get(cause_id) or 0),
                claimed_totes=claimed.get(cause_id, 0),
                pending_claims=pending.get(cause_id, 0),
            )
            for cause_id in cause_ids
        }
