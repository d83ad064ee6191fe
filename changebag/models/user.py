from functools import wraps

from flask import jsonify
from flask_login import UserMixin, current_user
from werkzeug.security import generate_password_hash, check_password_hash

from changebag import db, login_manager


class UserRole:
    """User role constants."""
    CLAIMER = "claimer"
    SPONSOR = "sponsor"
    ADMIN = "admin"

    CHOICES = [
        (CLAIMER, "Claimer"),
        (SPONSOR, "Sponsor"),
        (ADMIN, "Administrator"),
    ]

    VALUES = [value for value, _ in CHOICES]


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256))
    name = db.Column(db.String(200))
    phone = db.Column(db.String(20))
    role = db.Column(db.String(20), default=UserRole.CLAIMER, nullable=False)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    # Relationships
    causes = db.relationship("Cause", back_populates="creator")

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return bool(self.password_hash) and check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN

    @property
    def role_display(self):
        for value, label in UserRole.CHOICES:
            if value == self.role:
                return label
        return self.role

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
            "role": self.role,
        }

    def __repr__(self):
        return f"<User {self.email}>"


def admin_required(f):
    """Decorator to require admin role for a route."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify(message="Authentication required"), 401
        if not current_user.is_admin:
            return jsonify(message="Admin access required"), 403
        return f(*args, **kwargs)
    return decorated_function


def current_user_id():
    """Id of the logged-in user, or None for anonymous requests."""
    return current_user.id if current_user.is_authenticated else None


@login_manager.user_loader
def load_user(id):
    return db.session.get(User, int(id))
