"""Claim lifecycle and query surface."""

import logging
from datetime import datetime, time

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from changebag import db
from changebag.errors import ConflictError, NotFoundError, ValidationError
from changebag.models import Cause, Claim, ClaimSource, ClaimStatus, WaitlistEntry
from changebag.services.inventory import InventoryService
from changebag.services.waitlist import WaitlistService
from changebag.utils import (
    is_valid_email,
    non_text_fields,
    normalize_email,
    paginate,
    parse_date,
    to_number,
    utcnow,
)

logger = logging.getLogger(__name__)

ALREADY_CLAIMED = (
    "You have already claimed a tote for this cause. "
    "Each user can claim only one tote per cause."
)
NO_TOTES = "No totes available for this cause"


class ClaimService:
    """Service for tote claims.

    Status only moves forward along pending -> verified -> shipped ->
    delivered (skips allowed). Any non-terminal claim may be cancelled.
    """

    @staticmethod
    def get_claim(claim_id) -> Claim:
        claim = db.session.get(Claim, claim_id) if claim_id else None
        if not claim:
            raise NotFoundError("Claim not found")
        return claim

    @staticmethod
    def check_existing_claim(email: str, cause_id) -> Claim | None:
        return Claim.query.filter_by(cause_id=cause_id, email=normalize_email(email)).first()

    @staticmethod
    def create_claim(data: dict, commit: bool = True) -> Claim:
        """Reserve one tote for the claimant.

        The cause row stays locked from the availability check until the
        insert; the (cause, email) unique constraint catches duplicates
        that slip past the existence check.
        """
        cause_id = to_number(data.get("causeId") or data.get("cause_id"))
        missing = []
        if cause_id is None:
            missing.append("causeId")
        for field in ("fullName", "email"):
            if not data.get(field):
                missing.append(field)
        if missing:
            raise ValidationError("Missing required fields", missing_fields=missing)
        invalid = non_text_fields(
            data, ("purpose", "address", "city", "state", "zipCode", "referrerUrl")
        )
        if not is_valid_email(data["email"]):
            invalid["email"] = "must be a valid email address"
        if invalid:
            raise ValidationError("Invalid field values", invalid_fields=invalid)

        email = normalize_email(data["email"])
        if ClaimService.check_existing_claim(email, cause_id):
            raise ConflictError(ALREADY_CLAIMED)

        cause = (
            db.session.query(Cause).filter(Cause.id == cause_id).with_for_update().first()
        )
        if not cause:
            raise NotFoundError("Cause not found")

        if InventoryService.compute_inventory(cause.id).claimable_totes <= 0:
            raise ConflictError(NO_TOTES)

        source = data.get("source")
        if source not in ClaimSource.VALUES:
            source = ClaimSource.DIRECT

        claim = Claim(
            cause_id=cause.id,
            cause_title=cause.title,
            full_name=str(data["fullName"]).strip(),
            email=email,
            phone=data.get("phone"),
            purpose=data.get("purpose"),
            address=data.get("address"),
            city=data.get("city"),
            state=data.get("state"),
            zip_code=data.get("zipCode") or data.get("zip_code"),
            status=ClaimStatus.PENDING,
            email_verified=False,
            source=source,
            referrer_url=data.get("referrerUrl"),
            qr_code_scanned=bool(data.get("qrCodeScanned", source == ClaimSource.QR_CODE)),
        )
        db.session.add(claim)
        try:
            if commit:
                db.session.commit()
            else:
                db.session.flush()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError(ALREADY_CLAIMED)

        logger.info("Claim %s created for cause %s (%s)", claim.id, cause.id, source)
        return claim

    @staticmethod
    def create_claim_from_magic_link(token: str, data: dict) -> Claim:
        """Claim on behalf of a notified waitlist entry and mark it claimed.

        Both writes commit together or not at all.
        """
        entry = WaitlistService.validate_magic_link(token)

        claim_data = dict(data)
        claim_data.update({
            "causeId": entry.cause_id,
            "email": entry.email,
            "fullName": data.get("fullName") or entry.full_name,
            "phone": data.get("phone") or entry.phone,
            "source": ClaimSource.MAGIC_LINK,
        })
        claim = ClaimService.create_claim(claim_data, commit=False)
        WaitlistService.mark_waitlist_as_claimed(entry.id, commit=False)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError(ALREADY_CLAIMED)

        logger.info("Waitlist entry %s claimed via magic link (claim %s)", entry.id, claim.id)
        return claim

    @staticmethod
    def update_claim_status(claim_id, new_status: str, details: dict = None) -> Claim:
        if new_status not in ClaimStatus.VALUES:
            raise ValidationError("Invalid status", invalid_fields={"status": new_status})

        claim = ClaimService.get_claim(claim_id)
        current = claim.status

        if claim.is_terminal:
            raise ConflictError(f"Claim is already {current}", current_status=current)
        if new_status == current:
            raise ConflictError(f"Claim is already {current}", current_status=current)
        if new_status != ClaimStatus.CANCELLED and (
            ClaimStatus.PROGRESSION.index(new_status) < ClaimStatus.PROGRESSION.index(current)
        ):
            raise ConflictError(
                f"Cannot move a claim from {current} back to {new_status}",
                current_status=current,
            )

        now = utcnow()
        claim.status = new_status
        if new_status == ClaimStatus.SHIPPED:
            claim.shipping_date = now
        elif new_status == ClaimStatus.DELIVERED:
            claim.delivery_date = now

        details = details or {}
        if details.get("trackingNumber"):
            claim.tracking_number = details["trackingNumber"]
        if details.get("carrier"):
            claim.carrier = details["carrier"]
        if details.get("estimatedDelivery"):
            claim.estimated_delivery = parse_date(details["estimatedDelivery"])

        db.session.commit()
        logger.info("Claim %s moved from %s to %s", claim.id, current, new_status)
        return claim

    @staticmethod
    def verify_qr_code_claim(claim_id) -> Claim:
        claim = ClaimService.get_claim(claim_id)
        if claim.source != ClaimSource.QR_CODE and not claim.qr_code_scanned:
            raise ConflictError("This claim was not made from a QR code")
        if claim.status not in (ClaimStatus.PENDING, ClaimStatus.VERIFIED):
            raise ConflictError(
                f"Cannot verify a claim that is {claim.status}", current_status=claim.status
            )

        claim.status = ClaimStatus.VERIFIED
        claim.email_verified = True
        db.session.commit()
        return claim

    @staticmethod
    def mark_email_verified(claim_id) -> Claim:
        claim = ClaimService.get_claim(claim_id)
        claim.email_verified = True
        db.session.commit()
        return claim

    @staticmethod
    def list_claims(page: int = 1, limit: int = 10, source=None, status=None):
        query = Claim.query
        if source:
            query = query.filter(Claim.source == source)
        if status:
            query = query.filter(Claim.status == status)
        query = query.order_by(Claim.created_at.desc(), Claim.id.desc())
        return paginate(query, page, limit)

    @staticmethod
    def claims_stats() -> dict:
        counts = dict(
            db.session.query(Claim.status, func.count(Claim.id)).group_by(Claim.status).all()
        )
        midnight = datetime.combine(utcnow().date(), time.min)
        today = Claim.query.filter(Claim.created_at >= midnight).count()
        return {
            "byStatus": {status: counts.get(status, 0) for status in ClaimStatus.VALUES},
            "total": sum(counts.values()),
            "today": today,
        }

    @staticmethod
    def claimer_dashboard(email: str) -> dict:
        """Everything a claimer has going on, looked up by email."""
        email = normalize_email(email)
        claims = (
            Claim.query.filter_by(email=email)
            .order_by(Claim.created_at.desc(), Claim.id.desc())
            .all()
        )
        waitlist = (
            WaitlistEntry.query.filter_by(email=email)
            .order_by(WaitlistEntry.created_at.desc(), WaitlistEntry.id.desc())
            .all()
        )

        by_status = {status: 0 for status in ClaimStatus.VALUES}
        for claim in claims:
            by_status[claim.status] = by_status.get(claim.status, 0) + 1

        return {
            "claims": [claim.to_dict() for claim in claims],
            "waitlist": [entry.to_dict() for entry in waitlist],
            "stats": {
                "totalClaims": len(claims),
                "byStatus": by_status,
                "waitlistEntries": len(waitlist),
            },
        }
