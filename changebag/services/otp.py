"""One-time passcodes sent by SMS."""

import hashlib
import hmac
import logging
import secrets
from datetime import timedelta

import requests
from flask import current_app

from changebag import db
from changebag.errors import ConflictError, DependencyFailure, NotFoundError, ValidationError
from changebag.models import OtpVerification
from changebag.utils import standardize_phone_number, utcnow

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


def _hash_code(code: str) -> str:
    return hashlib.sha256(code.encode()).hexdigest()


def generate_code() -> str:
    return f"{secrets.randbelow(1000000):06d}"


def send_sms(to: str, body: str) -> str:
    """Send an SMS through Twilio. Returns the message SID."""
    config = current_app.config
    sid = config.get("TWILIO_ACCOUNT_SID")
    token = config.get("TWILIO_AUTH_TOKEN")
    from_number = config.get("TWILIO_FROM_NUMBER")
    if not sid or not token or not from_number:
        raise DependencyFailure("SMS provider is not configured")

    try:
        resp = requests.post(
            TWILIO_MESSAGES_URL.format(sid=sid),
            auth=(sid, token),
            data={"To": to, "From": from_number, "Body": body},
            timeout=10,
        )
    except requests.RequestException as e:
        raise DependencyFailure(f"SMS provider unreachable: {e}")
    if resp.status_code >= 400:
        raise DependencyFailure(f"SMS provider error {resp.status_code}: {resp.text}")
    return resp.json().get("sid", "")


class OtpService:

    @staticmethod
    def send_otp(phone: str) -> OtpVerification:
        if not phone:
            raise ValidationError("Phone number is required", missing_fields=["phone"])
        phone = standardize_phone_number(phone)
        if len(phone) != 13:
            raise ValidationError(
                "Please enter a valid 10-digit mobile number",
                invalid_fields={"phone": "must be a 10-digit Indian mobile number"},
            )

        ttl = current_app.config.get("OTP_TTL_MINUTES", 10)
        code = generate_code()

        # Only the latest code for a number is usable
        OtpVerification.query.filter_by(phone=phone, verified=False).delete()
        record = OtpVerification(
            phone=phone,
            otp_hash=_hash_code(code),
            expires_at=utcnow() + timedelta(minutes=ttl),
            verified=False,
        )
        db.session.add(record)
        db.session.flush()

        try:
            send_sms(phone, f"Your CauseConnect verification code is {code}. It expires in {ttl} minutes.")
        except DependencyFailure:
            db.session.rollback()
            raise
        db.session.commit()
        logger.info("OTP sent to %s", phone[:-4] + "****")
        return record

    @staticmethod
    def verify_otp(phone: str, code: str) -> OtpVerification:
        missing = [name for name, value in (("phone", phone), ("otp", code)) if not value]
        if missing:
            raise ValidationError("Phone number and OTP are required", missing_fields=missing)
        phone = standardize_phone_number(phone)

        record = (
            OtpVerification.query.filter_by(phone=phone)
            .order_by(OtpVerification.created_at.desc(), OtpVerification.id.desc())
            .first()
        )
        if record is None:
            raise NotFoundError("No OTP was sent to this number")
        if record.verified:
            raise ConflictError("This OTP has already been used")
        if record.is_expired:
            raise ConflictError("OTP has expired. Please request a new one")
        if not hmac.compare_digest(record.otp_hash, _hash_code(str(code).strip())):
            raise ValidationError("Invalid OTP", invalid_fields={"otp": "does not match"})

        record.verified = True
        db.session.commit()
        logger.info("OTP verified for %s", phone[:-4] + "****")
        return record
