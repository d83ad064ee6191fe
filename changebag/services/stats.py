from datetime import timedelta

from sqlalchemy import func

from changebag import db
from changebag.models import (
    Cause,
    CauseStatus,
    Claim,
    ClaimStatus,
    Sponsorship,
    SponsorshipStatus,
    WaitlistEntry,
    WaitlistStatus,
)
from changebag.utils import utcnow


def _counts_by_status(model, values) -> dict:
    rows = db.session.query(model.status, func.count(model.id)).group_by(model.status).all()
    counts = dict(rows)
    return {status: counts.get(status, 0) for status in values}


class StatsService:
    """Service for platform-wide totals."""

    @staticmethod
    def get_public_stats() -> dict:
        """
        Headline numbers for the landing page.

        Returns dict with:
            - totalSponsors: distinct sponsor emails
            - totalBagsSponsored: totes on approved sponsorships
            - activeCampaigns: approved sponsorships currently online
            - totalRaised: sum of approved sponsorship totals
            - totalClaimers: distinct claimant emails
            - totalBagsClaimed: verified, shipped or delivered claims
            - totalCauses: approved causes
            - growthData: per month over the last six months
            - impactData: claimed totes per cause category
        """
        approved = Sponsorship.status == SponsorshipStatus.APPROVED

        total_sponsors = db.session.query(func.count(func.distinct(Sponsorship.email))).scalar()
        total_bags_sponsored, total_raised = db.session.query(
            func.coalesce(func.sum(Sponsorship.tote_quantity), 0),
            func.coalesce(func.sum(Sponsorship.total_amount), 0),
        ).filter(approved).one()
        active_campaigns = Sponsorship.query.filter(approved, Sponsorship.is_online.is_(True)).count()

        total_claimers = db.session.query(func.count(func.distinct(Claim.email))).scalar()
        total_bags_claimed = Claim.query.filter(Claim.status.in_(ClaimStatus.CONSUMING)).count()
        total_causes = Cause.query.filter_by(status=CauseStatus.APPROVED).count()

        return {
            "totalSponsors": total_sponsors or 0,
            "totalBagsSponsored": int(total_bags_sponsored or 0),
            "activeCampaigns": active_campaigns,
            "totalRaised": float(total_raised or 0),
            "totalClaimers": total_claimers or 0,
            "totalBagsClaimed": total_bags_claimed,
            "totalCauses": total_causes,
            "growthData": StatsService.get_growth_data(),
            "impactData": StatsService.get_impact_by_category(),
        }

    @staticmethod
    def get_growth_data(months: int = 6) -> list[dict]:
        since = utcnow() - timedelta(days=31 * months)
        rows = (
            db.session.query(Sponsorship.created_at, Sponsorship.email, Sponsorship.tote_quantity)
            .filter(
                Sponsorship.status == SponsorshipStatus.APPROVED,
                Sponsorship.created_at >= since,
            )
            .order_by(Sponsorship.created_at)
            .all()
        )

        buckets = {}
        for created_at, email, quantity in rows:
            key = (created_at.year, created_at.month)
            bucket = buckets.setdefault(key, {"sponsors": set(), "impact": 0, "label": f"{created_at:%b}"})
            bucket["sponsors"].add(email)
            bucket["impact"] += quantity or 0

        return [
            {"month": bucket["label"], "sponsors": len(bucket["sponsors"]), "impact": bucket["impact"]}
            for _, bucket in sorted(buckets.items())
        ]

    @staticmethod
    def get_impact_by_category() -> list[dict]:
        rows = (
            db.session.query(Cause.category, func.count(Claim.id))
            .outerjoin(
                Claim,
                (Claim.cause_id == Cause.id) & Claim.status.in_(ClaimStatus.CONSUMING),
            )
            .group_by(Cause.category)
            .all()
        )
        impact = [{"cause": category, "bags": bags} for category, bags in rows]
        return sorted(impact, key=lambda item: item["bags"], reverse=True)

    @staticmethod
    def get_dashboard_stats() -> dict:
        """Admin dashboard counts by status plus revenue."""
        revenue = db.session.query(
            func.coalesce(func.sum(Sponsorship.total_amount), 0)
        ).filter(
            Sponsorship.status.in_([SponsorshipStatus.APPROVED, SponsorshipStatus.COMPLETED])
        ).scalar()
        collected = db.session.query(
            func.coalesce(func.sum(Sponsorship.payment_amount), 0)
        ).filter(Sponsorship.payment_id.isnot(None)).scalar()

        return {
            "causes": _counts_by_status(Cause, CauseStatus.VALUES),
            "sponsorships": _counts_by_status(Sponsorship, SponsorshipStatus.VALUES),
            "claims": _counts_by_status(Claim, ClaimStatus.VALUES),
            "waitlist": _counts_by_status(WaitlistEntry, WaitlistStatus.VALUES),
            "revenue": {
                "committed": float(revenue or 0),
                # Razorpay amounts are in paise
                "collected": (collected or 0) / 100,
            },
        }
