"""Waitlist positions and magic-link notifications."""

import logging
import secrets
from datetime import timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError

from changebag import db
from changebag.errors import ConflictError, NotFoundError, ValidationError
from changebag.models import Cause, WaitlistEntry, WaitlistStatus
from changebag.services import email as email_service
from changebag.services import notifications
from changebag.utils import (
    is_valid_email,
    is_valid_phone,
    non_text_fields,
    normalize_email,
    utcnow,
)

logger = logging.getLogger(__name__)


def _new_token() -> str:
    return secrets.token_hex(32)


def magic_link_url(cause_id, token: str) -> str:
    base = current_app.config["FRONTEND_URL"]
    return f"{base}/claim-tote/{cause_id}?token={token}&source=waitlist"


class WaitlistService:

    @staticmethod
    def get_entry(entry_id) -> WaitlistEntry:
        entry = db.session.get(WaitlistEntry, entry_id) if entry_id else None
        if not entry:
            raise NotFoundError("Waitlist entry not found")
        return entry

    @staticmethod
    def join_waitlist(cause_id, contact: dict, user_id=None) -> WaitlistEntry:
        """Add *contact* to the end of the cause's waitlist.

        Positions come from an atomic per-cause counter so concurrent joins
        never share or skip a position.
        """
        missing = [f for f in ("fullName", "email", "phone") if not contact.get(f)]
        if missing:
            raise ValidationError("Missing required fields", missing_fields=missing)

        invalid = non_text_fields(contact, ("fullName", "message"))
        if not is_valid_email(contact["email"]):
            invalid["email"] = "must be a valid email address"
        if not is_valid_phone(contact["phone"]):
            invalid["phone"] = "must be a valid phone number"
        if invalid:
            raise ValidationError("Invalid field values", invalid_fields=invalid)

        cause = db.session.get(Cause, cause_id) if cause_id else None
        if not cause:
            raise NotFoundError("Cause not found")

        email = normalize_email(contact["email"])
        existing = WaitlistEntry.query.filter_by(cause_id=cause.id, email=email).first()
        if existing:
            raise ConflictError("You are already on the waitlist for this cause")

        db.session.query(Cause).filter(Cause.id == cause.id).update(
            {Cause.waitlist_seq: Cause.waitlist_seq + 1}, synchronize_session=False
        )
        position = db.session.query(Cause.waitlist_seq).filter(Cause.id == cause.id).scalar()

        entry = WaitlistEntry(
            cause_id=cause.id,
            user_id=user_id,
            full_name=contact["fullName"].strip(),
            email=email,
            phone=str(contact["phone"]).strip(),
            message=contact.get("message") or "",
            notify_email=bool(contact.get("notifyEmail", True)),
            notify_sms=bool(contact.get("notifySms", False)),
            position=position,
            status=WaitlistStatus.WAITING,
        )
        db.session.add(entry)
        try:
            db.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent join for the same email
            db.session.rollback()
            raise ConflictError("You are already on the waitlist for this cause")

        logger.info("Waitlist entry %s joined cause %s at position %s", entry.id, cause.id, position)
        return entry

    @staticmethod
    def notify_waitlist_members(cause_id) -> int:
        """Send magic links to everyone still waiting, in position order.

        A failure on one entry is logged and the rest are still notified.
        Returns the number of entries moved to notified.
        """
        hours = current_app.config["MAGIC_LINK_HOURS"]
        now = utcnow()
        expires = now + timedelta(hours=hours)

        entries = (
            WaitlistEntry.query.filter_by(cause_id=cause_id, status=WaitlistStatus.WAITING)
            .order_by(WaitlistEntry.position.asc())
            .all()
        )
        # Plain values so a rollback mid-loop can't expire what we iterate over
        pending = [(entry.id, entry.position) for entry in entries]
        cause_title = db.session.get(Cause, cause_id).title if entries else ""

        notified = 0
        for entry_id, position in pending:
            try:
                entry = db.session.get(WaitlistEntry, entry_id)
                entry.magic_link_token = _new_token()
                entry.magic_link_sent_at = now
                entry.magic_link_expires = expires
                entry.status = WaitlistStatus.NOTIFIED
                db.session.commit()
            except Exception:
                db.session.rollback()
                logger.exception("Failed to notify waitlist entry %s (position %s)", entry_id, position)
                continue

            notified += 1
            if entry.notify_email:
                notifications.dispatch(
                    email_service.send_waitlist_notification_email,
                    entry.email,
                    entry.full_name,
                    cause_title,
                    magic_link_url(cause_id, entry.magic_link_token),
                    hours,
                )
        return notified

    @staticmethod
    def validate_magic_link(token: str) -> WaitlistEntry:
        entry = WaitlistEntry.query.filter_by(magic_link_token=token).first() if token else None
        if (
            entry is None
            or entry.status != WaitlistStatus.NOTIFIED
            or entry.magic_link_expires is None
            or entry.link_expired
        ):
            raise ConflictError("Invalid or expired magic link")
        return entry

    @staticmethod
    def mark_waitlist_as_claimed(entry_id, commit: bool = True) -> WaitlistEntry:
        entry = WaitlistService.get_entry(entry_id)
        entry.status = WaitlistStatus.CLAIMED
        if commit:
            db.session.commit()
        return entry

    @staticmethod
    def resend_notification(entry_id) -> WaitlistEntry:
        """Issue a fresh magic link to a notified or expired entry.

        Expired entries go back to notified so the new link validates.
        """
        entry = WaitlistService.get_entry(entry_id)
        if entry.status not in (WaitlistStatus.NOTIFIED, WaitlistStatus.EXPIRED):
            raise ConflictError(
                "Only notified or expired entries can be sent a new link",
                current_status=entry.status,
            )

        hours = current_app.config["MAGIC_LINK_HOURS"]
        now = utcnow()
        entry.magic_link_token = _new_token()
        entry.magic_link_sent_at = now
        entry.magic_link_expires = now + timedelta(hours=hours)
        entry.status = WaitlistStatus.NOTIFIED
        db.session.commit()

        notifications.dispatch(
            email_service.send_waitlist_notification_email,
            entry.email,
            entry.full_name,
            entry.cause.title,
            magic_link_url(entry.cause_id, entry.magic_link_token),
            hours,
            reminder=True,
        )
        return entry

    @staticmethod
    def expire_stale_entries(now=None) -> int:
        """Move notified entries whose link has lapsed to expired."""
        now = now or utcnow()
        count = (
            WaitlistEntry.query.filter(
                WaitlistEntry.status == WaitlistStatus.NOTIFIED,
                WaitlistEntry.magic_link_expires <= now,
            )
            .update({WaitlistEntry.status: WaitlistStatus.EXPIRED}, synchronize_session=False)
        )
        db.session.commit()
        if count:
            logger.info("Expired %d waitlist magic links", count)
        return count

    @staticmethod
    def list_for_cause(cause_id) -> list[WaitlistEntry]:
        return (
            WaitlistEntry.query.filter_by(cause_id=cause_id)
            .order_by(WaitlistEntry.position.asc())
            .all()
        )

    @staticmethod
    def list_all(status=None) -> list[WaitlistEntry]:
        query = WaitlistEntry.query
        if status:
            query = query.filter(WaitlistEntry.status == status)
        return query.order_by(WaitlistEntry.created_at.desc(), WaitlistEntry.id.desc()).all()

    @staticmethod
    def list_for_email(email: str) -> list[WaitlistEntry]:
        return (
            WaitlistEntry.query.filter_by(email=normalize_email(email))
            .order_by(WaitlistEntry.created_at.desc(), WaitlistEntry.id.desc())
            .all()
        )
