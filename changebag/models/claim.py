from changebag import db


class ClaimStatus:
    PENDING = "pending"
    VERIFIED = "verified"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    VALUES = [PENDING, VERIFIED, SHIPPED, DELIVERED, CANCELLED]

    # Forward order of the fulfilment track; cancelled sits outside it
    PROGRESSION = [PENDING, VERIFIED, SHIPPED, DELIVERED]
    # Statuses that consume a tote from the cause's inventory
    CONSUMING = [VERIFIED, SHIPPED, DELIVERED]
    TERMINAL = [DELIVERED, CANCELLED]


class ClaimSource:
    DIRECT = "direct"
    QR_CODE = "qr"
    WAITLIST = "waitlist"
    MAGIC_LINK = "magic-link"
    SPONSOR_LINK = "sponsor-link"
    PARTNER_API = "PARTNER_API"

    VALUES = [DIRECT, QR_CODE, WAITLIST, MAGIC_LINK, SPONSOR_LINK, PARTNER_API]


class Claim(db.Model):
    """A request to receive one tote from a cause."""

    __tablename__ = "claims"

    id = db.Column(db.Integer, primary_key=True)
    cause_id = db.Column(db.Integer, db.ForeignKey("causes.id"), nullable=False)
    cause_title = db.Column(db.String(200))

    full_name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(20))
    purpose = db.Column(db.Text)
    address = db.Column(db.String(255))
    city = db.Column(db.String(100))
    state = db.Column(db.String(100))
    zip_code = db.Column(db.String(20))

    status = db.Column(db.String(20), default=ClaimStatus.PENDING, nullable=False)
    email_verified = db.Column(db.Boolean, default=False, nullable=False)
    source = db.Column(db.String(20), default=ClaimSource.DIRECT, nullable=False)
    referrer_url = db.Column(db.String(500))
    qr_code_scanned = db.Column(db.Boolean, default=False, nullable=False)

    shipping_date = db.Column(db.DateTime)
    delivery_date = db.Column(db.DateTime)
    tracking_number = db.Column(db.String(100))
    carrier = db.Column(db.String(100))
    estimated_delivery = db.Column(db.Date)

    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    # Relationships
    cause = db.relationship("Cause", back_populates="claims")

    __table_args__ = (
        db.UniqueConstraint("cause_id", "email", name="uq_claims_cause_email"),
        db.Index("idx_claims_created_at", "created_at"),
        db.Index("idx_claims_status", "status"),
        db.Index("idx_claims_email", "email"),
        db.Index("idx_claims_source", "source"),
    )

    @property
    def is_terminal(self):
        return self.status in ClaimStatus.TERMINAL

    def to_dict(self):
        return {
            "id": self.id,
            "causeId": self.cause_id,
            "causeTitle": self.cause_title,
            "fullName": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "purpose": self.purpose,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
            "status": self.status,
            "emailVerified": self.email_verified,
            "source": self.source,
            "referrerUrl": self.referrer_url,
            "qrCodeScanned": self.qr_code_scanned,
            "shippingDate": self.shipping_date.isoformat() if self.shipping_date else None,
            "deliveryDate": self.delivery_date.isoformat() if self.delivery_date else None,
            "trackingNumber": self.tracking_number,
            "carrier": self.carrier,
            "estimatedDelivery": (
                self.estimated_delivery.isoformat() if self.estimated_delivery else None
            ),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Claim {self.id}: {self.email} ({self.status})>"
