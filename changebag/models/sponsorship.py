from changebag import db


class SponsorshipStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    FAILED = "failed"

    VALUES = [PENDING, APPROVED, REJECTED, COMPLETED, FAILED]


class DistributionType:
    ONLINE = "online"
    PHYSICAL = "physical"

    VALUES = [ONLINE, PHYSICAL]


class PaymentStatus:
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


DEFAULT_LOGO_POSITION = {"x": 0, "y": 0, "scale": 1, "angle": 0}
DEFAULT_DEMOGRAPHICS = {"ageGroups": [], "income": "", "education": "", "other": ""}


class Sponsorship(db.Model):
    """An organization's commitment to fund totes for a cause."""

    __tablename__ = "sponsorships"

    id = db.Column(db.Integer, primary_key=True)
    sponsor_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    cause_id = db.Column(db.Integer, db.ForeignKey("causes.id"), nullable=False, index=True)

    organization_name = db.Column(db.String(200), nullable=False, index=True)
    contact_name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(120), nullable=False, index=True)
    phone = db.Column(db.String(20), nullable=False)

    tote_quantity = db.Column(db.Integer, nullable=False)
    # Legacy duplicate of tote_quantity, kept equal
    number_of_totes = db.Column(db.Integer)
    unit_price = db.Column(db.Float, nullable=False)
    total_amount = db.Column(db.Float, nullable=False)

    logo_url = db.Column(db.String(500), nullable=False)
    mockup_url = db.Column(db.String(500))
    message = db.Column(db.Text, default="")

    distribution_type = db.Column(db.String(20), nullable=False)
    selected_cities = db.Column(db.JSON, default=list)
    distribution_start_date = db.Column(db.Date, nullable=False)
    distribution_end_date = db.Column(db.Date, nullable=False)
    distribution_locations = db.Column(db.JSON, default=list)
    demographics = db.Column(db.JSON)
    logo_position = db.Column(db.JSON)

    status = db.Column(db.String(20), default=SponsorshipStatus.PENDING, nullable=False, index=True)
    approved_by_id = db.Column(db.Integer, db.ForeignKey("users.id"))
    approved_at = db.Column(db.DateTime)
    rejection_reason = db.Column(db.Text)
    is_online = db.Column(db.Boolean)
    ended_at = db.Column(db.DateTime)
    ended_by_id = db.Column(db.Integer, db.ForeignKey("users.id"))

    # Payment
    payment_id = db.Column(db.String(64))
    payment_status = db.Column(db.String(20), default=PaymentStatus.PENDING)
    payment_order_id = db.Column(db.String(64), index=True)
    payment_amount = db.Column(db.Integer)
    payment_currency = db.Column(db.String(8), default="INR")
    payment_date = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, server_default=db.func.now(), index=True)
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    # Relationships
    cause = db.relationship("Cause", back_populates="sponsorships")
    sponsor = db.relationship("User", foreign_keys=[sponsor_id])
    approved_by = db.relationship("User", foreign_keys=[approved_by_id])
    ended_by = db.relationship("User", foreign_keys=[ended_by_id])

    @property
    def is_pending(self):
        return self.status == SponsorshipStatus.PENDING

    @property
    def is_approved(self):
        return self.status == SponsorshipStatus.APPROVED

    def to_dict(self):
        return {
            "id": self.id,
            "cause": {"id": self.cause.id, "title": self.cause.title} if self.cause else None,
            "sponsor": self.sponsor_id,
            "organizationName": self.organization_name,
            "contactName": self.contact_name,
            "email": self.email,
            "phone": self.phone,
            "toteQuantity": self.tote_quantity,
            "numberOfTotes": self.number_of_totes,
            "unitPrice": self.unit_price,
            "totalAmount": self.total_amount,
            "logoUrl": self.logo_url,
            "mockupUrl": self.mockup_url,
            "message": self.message,
            "distributionType": self.distribution_type,
            "selectedCities": self.selected_cities or [],
            "distributionStartDate": (
                self.distribution_start_date.isoformat() if self.distribution_start_date else None
            ),
            "distributionEndDate": (
                self.distribution_end_date.isoformat() if self.distribution_end_date else None
            ),
            "distributionLocations": self.distribution_locations or [],
            "demographics": self.demographics,
            "logoPosition": self.logo_position,
            "status": self.status,
            "approvedBy": self.approved_by_id,
            "approvedAt": self.approved_at.isoformat() if self.approved_at else None,
            "rejectionReason": self.rejection_reason,
            "isOnline": self.is_online,
            "endedAt": self.ended_at.isoformat() if self.ended_at else None,
            "endedBy": self.ended_by_id,
            "paymentStatus": self.payment_status,
            "paymentId": self.payment_id,
            "paymentOrderId": self.payment_order_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Sponsorship {self.id}: {self.organization_name} ({self.status})>"
