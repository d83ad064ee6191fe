from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from changebag import db
from changebag.errors import ConflictError, ValidationError
from changebag.models import User, UserRole
from changebag.utils import is_valid_email, normalize_email

bp = Blueprint("auth", __name__)


@bp.route("/register", methods=["POST"])
def register():
    data = request.get_json(silent=True) or {}
    email = normalize_email(data.get("email"))
    password = data.get("password") or ""
    name = (data.get("name") or "").strip()
    role = data.get("role") or UserRole.CLAIMER

    missing = [field for field, value in (("email", email), ("password", password), ("name", name))
               if not value]
    if missing:
        raise ValidationError("Missing required fields", missing_fields=missing)
    if not is_valid_email(email):
        raise ValidationError("Invalid field values", invalid_fields={"email": "must be a valid email address"})
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters",
                              invalid_fields={"password": "too short"})
    # Admins are promoted by another admin, never self-registered
    if role not in (UserRole.CLAIMER, UserRole.SPONSOR):
        raise ValidationError("Invalid role", invalid_fields={"role": role})

    if User.query.filter_by(email=email).first():
        raise ConflictError("Email already registered")

    user = User(email=email, name=name, phone=data.get("phone"), role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    login_user(user)
    return jsonify(user.to_dict()), 201


@bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    user = User.query.filter_by(email=normalize_email(data.get("email"))).first()

    if user and user.is_active and user.check_password(data.get("password") or ""):
        login_user(user, remember=bool(data.get("remember")))
        return jsonify(user.to_dict())

    return jsonify(message="Invalid email or password"), 401


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify(message="Logged out")


@bp.route("/me")
@login_required
def me():
    return jsonify(current_user.to_dict())
