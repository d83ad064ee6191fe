from changebag import db
from changebag.utils import utcnow


class WaitlistStatus:
    WAITING = "waiting"
    NOTIFIED = "notified"
    CLAIMED = "claimed"
    EXPIRED = "expired"

    VALUES = [WAITING, NOTIFIED, CLAIMED, EXPIRED]


class WaitlistEntry(db.Model):
    """Someone waiting for totes to become available on a cause."""

    __tablename__ = "waitlist_entries"

    id = db.Column(db.Integer, primary_key=True)
    cause_id = db.Column(db.Integer, db.ForeignKey("causes.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    full_name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(120), nullable=False, index=True)
    phone = db.Column(db.String(20), nullable=False)
    message = db.Column(db.Text)
    notify_email = db.Column(db.Boolean, default=True, nullable=False)
    notify_sms = db.Column(db.Boolean, default=False, nullable=False)

    # 1-based, dense per cause
    position = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), default=WaitlistStatus.WAITING, nullable=False, index=True)

    magic_link_token = db.Column(db.String(64), unique=True)
    magic_link_sent_at = db.Column(db.DateTime)
    magic_link_expires = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    # Relationships
    cause = db.relationship("Cause", back_populates="waitlist_entries")
    user = db.relationship("User")

    __table_args__ = (
        db.UniqueConstraint("cause_id", "email", name="uq_waitlist_cause_email"),
        db.UniqueConstraint("cause_id", "position", name="uq_waitlist_cause_position"),
    )

    @property
    def link_expired(self):
        return bool(self.magic_link_expires) and self.magic_link_expires <= utcnow()

    def to_dict(self, include_token=False):
        data = {
            "id": self.id,
            "causeId": self.cause_id,
            "userId": self.user_id,
            "fullName": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "message": self.message,
            "notifyEmail": self.notify_email,
            "notifySms": self.notify_sms,
            "position": self.position,
            "status": self.status,
            "magicLinkSentAt": (
                self.magic_link_sent_at.isoformat() if self.magic_link_sent_at else None
            ),
            "magicLinkExpires": (
                self.magic_link_expires.isoformat() if self.magic_link_expires else None
            ),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        if include_token:
            data["magicLinkToken"] = self.magic_link_token
        return data

    def __repr__(self):
        return f"<WaitlistEntry {self.id}: cause {self.cause_id} #{self.position} ({self.status})>"
