"""API partners and the claims they file for their customers."""

import logging

from sqlalchemy.exc import IntegrityError

from changebag import db
from changebag.errors import ConflictError, NotFoundError, ValidationError
from changebag.models import ApiPartner, Claim, ClaimSource
from changebag.models.api_partner import generate_api_key
from changebag.services.claims import ClaimService
from changebag.utils import is_valid_email, non_text_fields, normalize_email

logger = logging.getLogger(__name__)


class PartnerService:

    @staticmethod
    def get_partner(partner_id) -> ApiPartner:
        partner = db.session.get(ApiPartner, partner_id) if partner_id else None
        if not partner:
            raise NotFoundError("Partner not found")
        return partner

    @staticmethod
    def create_partner(data: dict) -> ApiPartner:
        """Register a partner. A fresh ``cb_`` API key is generated."""
        missing = [
            f for f in ("businessName", "businessEmail", "contactName") if not data.get(f)
        ]
        if missing:
            raise ValidationError("Missing required fields", missing_fields=missing)

        invalid = non_text_fields(data, ("businessName", "contactName"))
        if not is_valid_email(data["businessEmail"]):
            invalid["businessEmail"] = "must be a valid email address"
        if invalid:
            raise ValidationError("Invalid field values", invalid_fields=invalid)

        name = data["businessName"].strip()
        if ApiPartner.query.filter_by(business_name=name).first():
            raise ConflictError("A partner with this business name already exists")

        partner = ApiPartner(
            business_name=name,
            business_email=normalize_email(data["businessEmail"]),
            contact_name=data["contactName"].strip(),
            is_active=True,
        )
        db.session.add(partner)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError("A partner with this business name already exists")

        logger.info("API partner %s registered (%s)", partner.id, partner.business_name)
        return partner

    @staticmethod
    def list_partners() -> list[ApiPartner]:
        return ApiPartner.query.order_by(ApiPartner.business_name).all()

    @staticmethod
    def set_active(partner_id, active: bool) -> ApiPartner:
        partner = PartnerService.get_partner(partner_id)
        partner.is_active = bool(active)
        db.session.commit()
        logger.info("API partner %s %s", partner.id, "enabled" if partner.is_active else "disabled")
        return partner

    @staticmethod
    def rotate_key(partner_id) -> ApiPartner:
        partner = PartnerService.get_partner(partner_id)
        partner.api_key = generate_api_key()
        db.session.commit()
        logger.info("API key rotated for partner %s", partner.id)
        return partner

    @staticmethod
    def create_claim(partner: ApiPartner, data: dict) -> Claim:
        """File a claim for *partner*'s customer, always tagged PARTNER_API."""
        claim_data = dict(data)
        claim_data["source"] = ClaimSource.PARTNER_API
        claim = ClaimService.create_claim(claim_data)
        logger.info("Partner %s filed claim %s for cause %s",
                    partner.business_name, claim.id, claim.cause_id)
        return claim
