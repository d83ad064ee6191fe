from changebag import db


class CauseStatus:
    PENDING = "pending"
    APPROVED = "approved"
    COMPLETED = "completed"
    REJECTED = "rejected"

    VALUES = [PENDING, APPROVED, COMPLETED, REJECTED]


class Cause(db.Model):
    """A campaign seeking sponsorship for tote bags."""

    __tablename__ = "causes"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    image_url = db.Column(db.String(500), default="")
    category = db.Column(db.String(100), nullable=False, index=True)
    location = db.Column(db.String(200))

    target_amount = db.Column(db.Float, nullable=False, default=0)
    # Sum of approved sponsorship totals; recomputed by CauseService
    current_amount = db.Column(db.Float, nullable=False, default=0)

    creator_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    status = db.Column(db.String(20), default=CauseStatus.PENDING, nullable=False, index=True)
    is_online = db.Column(db.Boolean, default=True, nullable=False)

    start_date = db.Column(db.Date)
    distribution_start_date = db.Column(db.Date)
    distribution_end_date = db.Column(db.Date)

    # Last waitlist position handed out for this cause
    waitlist_seq = db.Column(db.Integer, default=0, nullable=False, server_default="0")

    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    # Relationships
    creator = db.relationship("User", back_populates="causes")
    sponsorships = db.relationship(
        "Sponsorship", back_populates="cause", cascade="all, delete-orphan"
    )
    claims = db.relationship("Claim", back_populates="cause", cascade="all, delete-orphan")
    waitlist_entries = db.relationship(
        "WaitlistEntry", back_populates="cause", cascade="all, delete-orphan"
    )

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "imageUrl": self.image_url,
            "category": self.category,
            "location": self.location,
            "targetAmount": float(self.target_amount or 0),
            "currentAmount": float(self.current_amount or 0),
            "status": self.status,
            "isOnline": self.is_online,
            "creator": self.creator.to_dict() if self.creator else None,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "distributionStartDate": (
                self.distribution_start_date.isoformat() if self.distribution_start_date else None
            ),
            "distributionEndDate": (
                self.distribution_end_date.isoformat() if self.distribution_end_date else None
            ),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Cause {self.id}: {self.title}>"
