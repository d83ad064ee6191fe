from changebag import db
from changebag.utils import utcnow


class OtpVerification(db.Model):
    """One-time codes sent by SMS to confirm a claimant's phone."""

    __tablename__ = "otp_verifications"

    id = db.Column(db.Integer, primary_key=True)
    phone = db.Column(db.String(20), nullable=False, index=True)
    otp_hash = db.Column(db.String(64), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    verified = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    @property
    def is_expired(self):
        return self.expires_at <= utcnow()

    def __repr__(self):
        return f"<OtpVerification {self.phone} verified={self.verified}>"
