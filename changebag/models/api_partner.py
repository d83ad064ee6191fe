import secrets
from functools import wraps

from flask import g, jsonify, request

from changebag import db
from changebag.utils import utcnow


def generate_api_key() -> str:
    return f"cb_{secrets.token_hex(16)}"


class ApiPartner(db.Model):
    """A business that files claims on behalf of its customers."""

    __tablename__ = "api_partners"

    id = db.Column(db.Integer, primary_key=True)
    business_name = db.Column(db.String(200), unique=True, nullable=False)
    business_email = db.Column(db.String(120), nullable=False)
    contact_name = db.Column(db.String(200), nullable=False)
    api_key = db.Column(db.String(64), unique=True, nullable=False, index=True, default=generate_api_key)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_used_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self, include_key=False):
        data = {
            "id": self.id,
            "businessName": self.business_name,
            "businessEmail": self.business_email,
            "contactName": self.contact_name,
            "isActive": self.is_active,
            "lastUsedAt": self.last_used_at.isoformat() if self.last_used_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        if include_key:
            data["apiKey"] = self.api_key
        return data

    def __repr__(self):
        return f"<ApiPartner {self.business_name}>"


def api_key_required(f):
    """Decorator to require an active partner's API key.

    The key is read from the ``X-API-Key`` header (``api-key`` and the
    ``apiKey`` query arg are also accepted). The partner lands on ``g.api_partner``.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        api_key = (
            request.headers.get("X-API-Key")
            or request.headers.get("api-key")
            or request.args.get("apiKey")
        )
        if not api_key:
            return jsonify(
                message="API key required",
                detail="Provide an API key in the X-API-Key header or apiKey query parameter",
            ), 401

        partner = ApiPartner.query.filter_by(api_key=api_key, is_active=True).first()
        if not partner:
            return jsonify(message="Invalid API key",
                           detail="The provided API key is invalid or inactive"), 401

        partner.last_used_at = utcnow()
        db.session.commit()
        g.api_partner = partner
        return f(*args, **kwargs)
    return decorated_function
