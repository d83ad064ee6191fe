import logging

from sqlalchemy import func, or_

from changebag import db
from changebag.errors import AuthorizationError, NotFoundError, ValidationError
from changebag.models import (
    Cause,
    CauseStatus,
    Claim,
    ClaimStatus,
    Sponsorship,
    SponsorshipStatus,
)
from changebag.services.inventory import InventoryService
from changebag.utils import non_text_fields, parse_date, to_number

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("title", "description", "category", "location", "imageUrl")


class CauseService:
    """Cause CRUD plus the derived currentAmount."""

    @staticmethod
    def get_cause(cause_id) -> Cause:
        cause = db.session.get(Cause, cause_id) if cause_id else None
        if not cause:
            raise NotFoundError("Cause not found")
        return cause

    @staticmethod
    def recompute_current_amount(cause_id) -> float:
        """Set current_amount to the sum of approved sponsorship totals.

        Runs inside the caller's transaction; the caller commits. The cause
        row is locked before summing so concurrent writers for the same cause
        each see the other's committed sponsorships.
        """
        cause = (
            db.session.query(Cause).filter(Cause.id == cause_id).with_for_update().first()
        )
        if cause is None:
            return 0

        db.session.flush()
        total = db.session.query(
            func.coalesce(func.sum(Sponsorship.total_amount), 0)
        ).filter(
            Sponsorship.cause_id == cause_id,
            Sponsorship.status == SponsorshipStatus.APPROVED,
        ).scalar()

        cause.current_amount = float(total or 0)
        return cause.current_amount

    @staticmethod
    def create_cause(data: dict, user) -> Cause:
        missing = [
            field for field in ("title", "description", "targetAmount", "category")
            if not data.get(field)
        ]
        if missing:
            raise ValidationError(
                "Please provide title, description, target amount, and category",
                missing_fields=missing,
            )

        invalid = non_text_fields(data, _TEXT_FIELDS)
        target_amount = to_number(data.get("targetAmount"))
        if target_amount is None or target_amount < 0:
            invalid["targetAmount"] = "must be a positive number"
        if invalid:
            raise ValidationError("Invalid field values", invalid_fields=invalid)

        cause = Cause(
            title=data["title"].strip(),
            description=data["description"],
            image_url=data.get("imageUrl") or "",
            target_amount=target_amount,
            current_amount=0,
            creator_id=user.id,
            location=data.get("location") or "",
            category=data["category"].strip(),
            # Admin-created causes go live straight away
            status=CauseStatus.APPROVED if user.is_admin else CauseStatus.PENDING,
            start_date=parse_date(data.get("startDate")),
            distribution_start_date=parse_date(data.get("distributionStartDate")),
            distribution_end_date=parse_date(data.get("distributionEndDate")),
        )
        db.session.add(cause)
        db.session.commit()
        logger.info("Cause %s created by user %s (%s)", cause.id, user.id, cause.status)
        return cause

    @staticmethod
    def _check_owner(cause: Cause, user, action: str) -> None:
        if not user.is_admin and cause.creator_id != user.id:
            raise AuthorizationError(f"Not authorized to {action} this cause")

    @staticmethod
    def update_cause(cause_id, data: dict, user) -> Cause:
        cause = CauseService.get_cause(cause_id)
        CauseService._check_owner(cause, user, "update")
        invalid = non_text_fields(data, _TEXT_FIELDS)
        if invalid:
            raise ValidationError("Invalid field values", invalid_fields=invalid)
        if data.get("status") and user.is_admin and data["status"] not in CauseStatus.VALUES:
            raise ValidationError("Invalid status", invalid_fields={"status": data["status"]})

        if data.get("title"):
            cause.title = data["title"].strip()
        if data.get("description"):
            cause.description = data["description"]
        if data.get("imageUrl"):
            cause.image_url = data["imageUrl"]
        if data.get("targetAmount"):
            target_amount = to_number(data["targetAmount"])
            if target_amount is None or target_amount < 0:
                raise ValidationError(
                    "Target amount must be a positive number",
                    invalid_fields={"targetAmount": "must be a positive number"},
                )
            cause.target_amount = target_amount
        if data.get("location"):
            cause.location = data["location"]
        if data.get("category"):
            cause.category = data["category"]
        if "isOnline" in data and user.is_admin:
            cause.is_online = bool(data["isOnline"])
        if data.get("status") and user.is_admin:
            cause.status = data["status"]
        if data.get("distributionStartDate"):
            cause.distribution_start_date = parse_date(data["distributionStartDate"])
        if data.get("distributionEndDate"):
            cause.distribution_end_date = parse_date(data["distributionEndDate"])

        db.session.commit()
        return cause

    @staticmethod
    def delete_cause(cause_id, user) -> None:
        cause = CauseService.get_cause(cause_id)
        CauseService._check_owner(cause, user, "delete")
        db.session.delete(cause)
        db.session.commit()
        logger.info("Cause %s deleted by user %s", cause_id, user.id)

    @staticmethod
    def update_status(cause_id, status: str, user) -> Cause:
        if not status or status not in CauseStatus.VALUES:
            raise ValidationError("Invalid status", invalid_fields={"status": status})
        cause = CauseService.get_cause(cause_id)
        if not user.is_admin:
            raise AuthorizationError("Not authorized to update cause status")
        cause.status = status
        db.session.commit()
        return cause

    @staticmethod
    def get_cause_detail(cause_id) -> dict:
        """Cause with its sponsorships and freshly derived inventory."""
        cause = CauseService.get_cause(cause_id)
        inventory = InventoryService.compute_inventory(cause.id)

        data = cause.to_dict()
        data["sponsorships"] = [
            {
                "id": s.id,
                "status": s.status,
                "organizationName": s.organization_name,
                "toteQuantity": s.tote_quantity,
                "totalAmount": s.total_amount,
                "createdAt": s.created_at.isoformat() if s.created_at else None,
            }
            for s in cause.sponsorships
        ]
        data.update(inventory.to_dict())
        return data

    @staticmethod
    def list_causes(status=None, category=None, is_online=None, search=None) -> list[dict]:
        query = Cause.query
        if status:
            query = query.filter(Cause.status == status)
        if category:
            query = query.filter(Cause.category == category)
        if is_online is not None:
            query = query.filter(Cause.is_online.is_(is_online))
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Cause.title.ilike(pattern), Cause.description.ilike(pattern)))

        causes = query.order_by(Cause.created_at.desc(), Cause.id.desc()).all()
        inventories = InventoryService.compute_for_causes([c.id for c in causes])

        results = []
        for cause in causes:
            data = cause.to_dict()
            data["hasApprovedSponsorship"] = any(
                s.status == SponsorshipStatus.APPROVED for s in cause.sponsorships
            )
            data["sponsorships"] = [
                {
                    "id": s.id,
                    "status": s.status,
                    "organizationName": s.organization_name,
                    "toteQuantity": s.tote_quantity,
                    "totalAmount": s.total_amount,
                }
                for s in cause.sponsorships
            ]
            data.update(inventories[cause.id].to_dict())
            results.append(data)
        return results

    @staticmethod
    def causes_by_user(user_id) -> list[Cause]:
        return (
            Cause.query.filter_by(creator_id=user_id)
            .order_by(Cause.created_at.desc(), Cause.id.desc())
            .all()
        )

    @staticmethod
    def sponsor_causes_with_claim_stats(user_id) -> list[dict]:
        """Causes created by *user_id* with tote totals and fulfilled claims."""
        causes = CauseService.causes_by_user(user_id)
        inventories = InventoryService.compute_for_causes([c.id for c in causes])

        results = []
        for cause in causes:
            fulfilled = (
                Claim.query.filter(
                    Claim.cause_id == cause.id,
                    Claim.status.in_([ClaimStatus.SHIPPED, ClaimStatus.DELIVERED]),
                )
                .order_by(Claim.created_at.desc())
                .all()
            )
            inventory = inventories[cause.id]
            results.append({
                "id": cause.id,
                "title": cause.title,
                "status": cause.status,
                "currentAmount": cause.current_amount,
                "targetAmount": cause.target_amount,
                "totalTotes": inventory.total_totes,
                "claimedTotes": inventory.claimed_totes,
                "availableTotes": inventory.available_totes,
                "fulfilledClaims": [
                    {
                        "id": claim.id,
                        "fullName": claim.full_name,
                        "status": claim.status,
                        "city": claim.city,
                        "createdAt": claim.created_at.isoformat() if claim.created_at else None,
                    }
                    for claim in fulfilled
                ],
            })
        return results
