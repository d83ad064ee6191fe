"""Sponsorship lifecycle: create, approve, reject, reupload, end."""

import logging
import math

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy import or_

from changebag import db
from changebag.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from changebag.models import Cause, DistributionType, Sponsorship, SponsorshipStatus
from changebag.models.sponsorship import DEFAULT_DEMOGRAPHICS, DEFAULT_LOGO_POSITION
from changebag.services import email as email_service
from changebag.services import notifications
from changebag.services.causes import CauseService
from changebag.services.waitlist import WaitlistService
from changebag.utils import is_valid_email, normalize_email, paginate, parse_date, to_number, utcnow

logger = logging.getLogger(__name__)

# Placeholder the wizard sends when the logo was only previewed in the browser
CLIENT_SIDE_LOGO = "logo_uploaded_client_side"

_REUPLOAD_SALT = "logo-reupload"

MAX_TOTE_QUANTITY = 1_000_000

# API field name -> accepted input keys, first non-empty wins
_FIELD_ALIASES = {
    "cause": ("cause", "selectedCause", "causeId", "cause_id"),
    "organizationName": ("organizationName", "organization_name"),
    "contactName": ("contactName", "contact_name"),
    "email": ("email",),
    "phone": ("phone",),
    "toteQuantity": ("toteQuantity", "numberOfTotes", "tote_quantity", "number_of_totes"),
    "unitPrice": ("unitPrice", "unit_price"),
    "totalAmount": ("totalAmount", "total_amount"),
    "logoUrl": ("logoUrl", "logo_url"),
    "mockupUrl": ("mockupUrl", "mockup_url"),
    "message": ("message",),
    "distributionType": ("distributionType", "distribution_type"),
    "selectedCities": ("selectedCities", "selected_cities"),
    "distributionStartDate": ("distributionStartDate", "distribution_start_date"),
    "distributionEndDate": ("distributionEndDate", "distribution_end_date"),
    "distributionLocations": ("distributionLocations", "distribution_locations"),
    "demographics": ("demographics",),
    "logoPosition": ("logoPosition", "logo_position"),
}

REQUIRED_FIELDS = [
    "cause",
    "organizationName",
    "contactName",
    "email",
    "phone",
    "toteQuantity",
    "unitPrice",
    "totalAmount",
    "distributionType",
    "selectedCities",
    "distributionStartDate",
    "distributionEndDate",
]


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def normalize_input(data: dict) -> dict:
    """Collapse aliased keys into one dict keyed by API field name."""
    normalized = {}
    for field, keys in _FIELD_ALIASES.items():
        for key in keys:
            if not _blank(data.get(key)):
                normalized[field] = data[key]
                break

    cause = normalized.get("cause")
    if isinstance(cause, dict):
        normalized["cause"] = cause.get("id") or cause.get("_id")

    if "distributionLocations" not in normalized:
        details = data.get("physicalDistributionDetails") or {}
        if isinstance(details, dict) and details.get("distributionLocations"):
            normalized["distributionLocations"] = details["distributionLocations"]

    if "distributionLocations" in normalized:
        normalized["distributionLocations"] = flatten_distribution_locations(
            normalized["distributionLocations"]
        )
    return normalized


def flatten_distribution_locations(locations) -> list[dict]:
    """Accept flat location dicts or ones whose ``name`` is itself the location."""
    if not isinstance(locations, list):
        return []

    flat = []
    for location in locations:
        if not isinstance(location, dict):
            continue
        source = location
        name = location.get("name")
        if isinstance(name, dict):
            source = {**location, **name}
            name = name.get("name")
        flat.append({
            "name": name or "",
            "address": source.get("address") or "",
            "contactPerson": source.get("contactPerson") or "",
            "phone": source.get("phone") or "",
            "location": source.get("location") or "",
            "totesCount": to_number(source.get("totesCount")) or 0,
        })
    return flat


def _validate(fields: dict, partial: bool = False) -> dict:
    """Check types and formats, returning the coerced values.

    Raises ValidationError listing every offending field.
    """
    missing = []
    if not partial:
        missing = [f for f in REQUIRED_FIELDS if f not in fields]
        if (
            fields.get("distributionType") == DistributionType.PHYSICAL
            and not fields.get("distributionLocations")
        ):
            missing.append("distributionLocations")

    invalid = {}
    values = {}

    if "cause" in fields:
        cause_id = to_number(fields["cause"])
        if isinstance(cause_id, int):
            values["cause"] = cause_id
        else:
            invalid["cause"] = "must be a cause id"

    if "email" in fields:
        if is_valid_email(fields["email"]):
            values["email"] = normalize_email(fields["email"])
        else:
            invalid["email"] = "must be a valid email address"

    if "toteQuantity" in fields:
        quantity = to_number(fields["toteQuantity"])
        if isinstance(quantity, int) and 0 < quantity <= MAX_TOTE_QUANTITY:
            values["toteQuantity"] = quantity
        else:
            invalid["toteQuantity"] = f"must be a whole number from 1 to {MAX_TOTE_QUANTITY}"

    for field in ("unitPrice", "totalAmount"):
        if field in fields:
            number = to_number(fields[field])
            if number is not None and number >= 0:
                values[field] = number
            else:
                invalid[field] = "must be a non-negative number"

    quantity, unit_price, total = (
        values.get(f) for f in ("toteQuantity", "unitPrice", "totalAmount")
    )
    if (
        None not in (quantity, unit_price, total)
        and not math.isclose(total, quantity * unit_price, abs_tol=0.01)
    ):
        invalid["totalAmount"] = "must equal toteQuantity x unitPrice"

    for field in ("distributionStartDate", "distributionEndDate"):
        if field in fields:
            parsed = parse_date(fields[field])
            if parsed:
                values[field] = parsed
            else:
                invalid[field] = "must be a date (YYYY-MM-DD)"

    start, end = values.get("distributionStartDate"), values.get("distributionEndDate")
    if start and end and end < start:
        invalid["distributionEndDate"] = "must not be before the start date"

    if "distributionType" in fields:
        if fields["distributionType"] in DistributionType.VALUES:
            values["distributionType"] = fields["distributionType"]
        else:
            invalid["distributionType"] = f"must be one of {', '.join(DistributionType.VALUES)}"

    if "selectedCities" in fields:
        if isinstance(fields["selectedCities"], list):
            values["selectedCities"] = [str(city) for city in fields["selectedCities"]]
        else:
            invalid["selectedCities"] = "must be a list"

    if missing or invalid:
        message = "Missing required fields" if missing else "Invalid field values"
        raise ValidationError(message, missing_fields=missing, invalid_fields=invalid)

    for field in fields:
        values.setdefault(field, fields[field])
    return values


class SponsorshipService:
    """Service for the sponsorship state machine.

    pending -> approved | rejected, rejected -> pending (logo reupload),
    approved -> completed. Every write recomputes the cause's amount in
    the same transaction.
    """

    @staticmethod
    def get_sponsorship(sponsorship_id) -> Sponsorship:
        sponsorship = db.session.get(Sponsorship, sponsorship_id) if sponsorship_id else None
        if not sponsorship:
            raise NotFoundError("Sponsorship not found")
        return sponsorship

    @staticmethod
    def create_sponsorship(data: dict, sponsor_id=None) -> Sponsorship:
        fields = normalize_input(data)

        # Derive the total before validating so it is never reported missing
        if "totalAmount" not in fields:
            quantity = to_number(fields.get("toteQuantity"))
            unit_price = to_number(fields.get("unitPrice"))
            if quantity is not None and unit_price is not None:
                fields["totalAmount"] = quantity * unit_price

        values = _validate(fields)

        cause = db.session.get(Cause, values["cause"])
        if not cause:
            raise NotFoundError("Cause not found")

        logo_url = values.get("logoUrl")
        if not logo_url or logo_url == CLIENT_SIDE_LOGO:
            logo_url = current_app.config["DEFAULT_LOGO_URL"]

        sponsorship = Sponsorship(
            cause_id=cause.id,
            sponsor_id=sponsor_id,
            organization_name=str(values["organizationName"]).strip(),
            contact_name=str(values["contactName"]).strip(),
            email=values["email"],
            phone=str(values["phone"]).strip(),
            tote_quantity=values["toteQuantity"],
            number_of_totes=values["toteQuantity"],
            unit_price=values["unitPrice"],
            total_amount=values["totalAmount"],
            logo_url=logo_url,
            mockup_url=values.get("mockupUrl"),
            message=values.get("message") or "",
            distribution_type=values["distributionType"],
            selected_cities=values["selectedCities"],
            distribution_start_date=values["distributionStartDate"],
            distribution_end_date=values["distributionEndDate"],
            distribution_locations=values.get("distributionLocations") or [],
            demographics=values.get("demographics") or dict(DEFAULT_DEMOGRAPHICS),
            logo_position=values.get("logoPosition") or dict(DEFAULT_LOGO_POSITION),
            status=SponsorshipStatus.PENDING,
            is_online=False,
        )
        db.session.add(sponsorship)
        CauseService.recompute_current_amount(cause.id)
        db.session.commit()

        logger.info(
            "Sponsorship %s created for cause %s by %s (%s totes)",
            sponsorship.id, cause.id, sponsorship.organization_name, sponsorship.tote_quantity,
        )
        return sponsorship

    @staticmethod
    def update_sponsorship(sponsorship_id, data: dict) -> Sponsorship:
        """Admin edit of a sponsorship's details. Status is not editable here."""
        sponsorship = SponsorshipService.get_sponsorship(sponsorship_id)
        fields = normalize_input(data)
        fields.pop("cause", None)
        if "totalAmount" in fields:
            # Check an explicit total against the stored quantity and price
            fields.setdefault("toteQuantity", sponsorship.tote_quantity)
            fields.setdefault("unitPrice", sponsorship.unit_price)
        values = _validate(fields, partial=True)

        columns = {
            "organizationName": "organization_name",
            "contactName": "contact_name",
            "email": "email",
            "phone": "phone",
            "unitPrice": "unit_price",
            "totalAmount": "total_amount",
            "logoUrl": "logo_url",
            "mockupUrl": "mockup_url",
            "message": "message",
            "distributionType": "distribution_type",
            "selectedCities": "selected_cities",
            "distributionStartDate": "distribution_start_date",
            "distributionEndDate": "distribution_end_date",
            "distributionLocations": "distribution_locations",
            "demographics": "demographics",
            "logoPosition": "logo_position",
        }
        for field, column in columns.items():
            if field in values:
                setattr(sponsorship, column, values[field])

        if "toteQuantity" in values:
            sponsorship.tote_quantity = values["toteQuantity"]
        sponsorship.number_of_totes = sponsorship.tote_quantity

        if "totalAmount" not in values and ("toteQuantity" in values or "unitPrice" in values):
            sponsorship.total_amount = sponsorship.tote_quantity * sponsorship.unit_price

        CauseService.recompute_current_amount(sponsorship.cause_id)
        db.session.commit()
        return sponsorship

    @staticmethod
    def delete_sponsorship(sponsorship_id) -> None:
        sponsorship = SponsorshipService.get_sponsorship(sponsorship_id)
        cause_id = sponsorship.cause_id
        db.session.delete(sponsorship)
        CauseService.recompute_current_amount(cause_id)
        db.session.commit()
        logger.info("Sponsorship %s deleted", sponsorship_id)

    @staticmethod
    def approve_sponsorship(sponsorship_id, admin_id) -> Sponsorship:
        sponsorship = SponsorshipService.get_sponsorship(sponsorship_id)
        if sponsorship.status != SponsorshipStatus.PENDING:
            raise ConflictError(
                "Only pending sponsorships can be approved",
                current_status=sponsorship.status,
            )

        sponsorship.status = SponsorshipStatus.APPROVED
        sponsorship.approved_by_id = admin_id
        sponsorship.approved_at = utcnow()
        sponsorship.is_online = True
        sponsorship.rejection_reason = None
        CauseService.recompute_current_amount(sponsorship.cause_id)
        db.session.commit()
        logger.info("Sponsorship %s approved by user %s", sponsorship.id, admin_id)

        notifications.dispatch(
            email_service.send_sponsorship_approval_email,
            sponsorship.email,
            sponsorship.contact_name,
            sponsorship.organization_name,
            sponsorship.cause.title,
        )

        # Waitlist members hear about the new totes; a failure here leaves the approval intact
        try:
            notified = WaitlistService.notify_waitlist_members(sponsorship.cause_id)
        except Exception:
            db.session.rollback()
            logger.exception("Waitlist notification failed for cause %s", sponsorship.cause_id)
        else:
            logger.info("Notified %d waitlist entries for cause %s", notified, sponsorship.cause_id)
        return sponsorship

    @staticmethod
    def reject_sponsorship(sponsorship_id, reason: str = None) -> Sponsorship:
        sponsorship = SponsorshipService.get_sponsorship(sponsorship_id)
        if sponsorship.status != SponsorshipStatus.PENDING:
            raise ConflictError(
                "Only pending sponsorships can be rejected",
                current_status=sponsorship.status,
            )

        sponsorship.status = SponsorshipStatus.REJECTED
        sponsorship.rejection_reason = (reason or "").strip() or None
        sponsorship.is_online = False
        CauseService.recompute_current_amount(sponsorship.cause_id)
        db.session.commit()
        logger.info("Sponsorship %s rejected", sponsorship.id)

        notifications.dispatch(
            email_service.send_logo_rejection_email,
            sponsorship.email,
            sponsorship.contact_name,
            sponsorship.cause.title,
            sponsorship.rejection_reason,
            SponsorshipService.reupload_url(sponsorship.id),
        )
        return sponsorship

    @staticmethod
    def reupload_logo(sponsorship_id, logo_url: str, logo_position=None) -> Sponsorship:
        sponsorship = SponsorshipService.get_sponsorship(sponsorship_id)
        if _blank(logo_url) or logo_url == CLIENT_SIDE_LOGO:
            raise ValidationError("Logo URL is required", missing_fields=["logoUrl"])
        if sponsorship.status != SponsorshipStatus.REJECTED:
            raise ConflictError(
                "Only rejected sponsorships can upload a new logo",
                current_status=sponsorship.status,
            )

        sponsorship.logo_url = logo_url.strip()
        if logo_position:
            sponsorship.logo_position = logo_position
        sponsorship.status = SponsorshipStatus.PENDING
        sponsorship.rejection_reason = None
        db.session.commit()
        logger.info("Sponsorship %s resubmitted with a new logo", sponsorship.id)
        return sponsorship

    @staticmethod
    def end_campaign(sponsorship_id, admin_id) -> Sponsorship:
        sponsorship = SponsorshipService.get_sponsorship(sponsorship_id)
        if sponsorship.status != SponsorshipStatus.APPROVED:
            raise ConflictError(
                f"Cannot end a campaign that is {sponsorship.status}",
                current_status=sponsorship.status,
            )

        sponsorship.status = SponsorshipStatus.COMPLETED
        sponsorship.is_online = False
        sponsorship.ended_at = utcnow()
        sponsorship.ended_by_id = admin_id
        CauseService.recompute_current_amount(sponsorship.cause_id)
        db.session.commit()
        logger.info("Campaign for sponsorship %s ended by user %s", sponsorship.id, admin_id)

        notifications.dispatch(
            email_service.send_campaign_completion_email,
            sponsorship.email,
            sponsorship.contact_name,
            sponsorship.cause.title,
            sponsorship.tote_quantity,
        )
        return sponsorship

    # Signed reupload links

    @staticmethod
    def _serializer() -> URLSafeTimedSerializer:
        return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=_REUPLOAD_SALT)

    @staticmethod
    def make_reupload_token(sponsorship_id) -> str:
        return SponsorshipService._serializer().dumps(sponsorship_id)

    @staticmethod
    def reupload_url(sponsorship_id) -> str:
        token = SponsorshipService.make_reupload_token(sponsorship_id)
        return f"{current_app.config['FRONTEND_URL']}/sponsor/reupload-logo?token={token}"

    @staticmethod
    def load_reupload_token(token: str):
        """Return the sponsorship id a reupload token was issued for."""
        try:
            return SponsorshipService._serializer().loads(
                token, max_age=current_app.config["REUPLOAD_LINK_MAX_AGE"]
            )
        except SignatureExpired:
            raise AuthorizationError("This reupload link has expired")
        except BadSignature:
            raise AuthorizationError("Invalid reupload link")

    # Read side

    @staticmethod
    def list_pending() -> list[Sponsorship]:
        return (
            Sponsorship.query.filter_by(status=SponsorshipStatus.PENDING)
            .order_by(Sponsorship.created_at.desc(), Sponsorship.id.desc())
            .all()
        )

    @staticmethod
    def list_for_user(user) -> list[Sponsorship]:
        return (
            Sponsorship.query.filter(
                or_(Sponsorship.sponsor_id == user.id, Sponsorship.email == normalize_email(user.email))
            )
            .order_by(Sponsorship.created_at.desc(), Sponsorship.id.desc())
            .all()
        )

    @staticmethod
    def list_sponsorships(status=None, page: int = 1, limit: int = 10):
        query = Sponsorship.query
        if status:
            query = query.filter(Sponsorship.status == status)
        query = query.order_by(Sponsorship.created_at.desc(), Sponsorship.id.desc())
        return paginate(query, page, limit)
