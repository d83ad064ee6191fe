from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from changebag.errors import ValidationError
from changebag.models import Settings, admin_required
from changebag.services import email as email_service
from changebag.utils import is_valid_email, non_text_fields

bp = Blueprint("settings", __name__)


@bp.route("/smtp")
@login_required
@admin_required
def smtp_config():
    return jsonify(
        config=Settings.get_smtp_config(),
        configured=email_service.is_configured(),
        supportEmail=Settings.get_support_email(),
    )


@bp.route("/smtp", methods=["POST", "PUT"])
@login_required
@admin_required
def save_smtp_config():
    """Save SMTP settings. The stored password is kept unless a new one is sent."""
    data = request.get_json(silent=True) or {}
    invalid = non_text_fields(data, ("host", "user", "from_email", "password", "support_email"))
    if invalid:
        raise ValidationError("Invalid field values", invalid_fields=invalid)

    from_email = (data.get("from_email") or "").strip()
    if from_email and not is_valid_email(from_email):
        raise ValidationError("Invalid field values", invalid_fields={"from_email": "must be a valid email address"})

    Settings.save_smtp_config(
        host=data.get("host") or "",
        port=data.get("port") or "587",
        user=data.get("user") or "",
        from_email=from_email,
        use_tls=bool(data.get("use_tls", True)),
        password=data.get("password") or None,
    )
    if data.get("support_email"):
        Settings.set("support_email", data["support_email"].strip())

    return jsonify(config=Settings.get_smtp_config(), configured=email_service.is_configured())


@bp.route("/smtp/test", methods=["POST"])
@login_required
@admin_required
def test_smtp():
    """Send a test email to the logged-in admin and return JSON {ok, message}."""
    if not email_service.is_configured():
        return jsonify(ok=False, message="SMTP is not fully configured.")
    try:
        email_service.send_email(
            current_user.email,
            "CauseConnect test email",
            "<p>SMTP settings are working.</p>",
            "SMTP settings are working.",
        )
    except Exception as exc:
        current_app.logger.exception("SMTP test failed")
        return jsonify(ok=False, message=f"Send failed: {exc}"), 502
    return jsonify(ok=True, message=f"Test email sent to {current_user.email}")
