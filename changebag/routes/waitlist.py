from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from changebag.errors import AuthorizationError
from changebag.models import admin_required, current_user_id
from changebag.services import WaitlistService
from changebag.utils import to_number

bp = Blueprint("waitlist", __name__)


@bp.route("/", methods=["POST"])
def join():
    data = request.get_json(silent=True) or {}
    entry = WaitlistService.join_waitlist(
        to_number(data.get("causeId") or data.get("cause_id")), data, user_id=current_user_id()
    )
    return jsonify(entry.to_dict()), 201


@bp.route("/validate/<token>")
def validate(token):
    entry = WaitlistService.validate_magic_link(token)
    return jsonify(valid=True, entry=entry.to_dict())


@bp.route("/cause/<int:cause_id>")
@login_required
@admin_required
def for_cause(cause_id):
    return jsonify([entry.to_dict() for entry in WaitlistService.list_for_cause(cause_id)])


@bp.route("/all")
@login_required
@admin_required
def all_entries():
    entries = WaitlistService.list_all(status=request.args.get("status"))
    return jsonify([entry.to_dict() for entry in entries])


@bp.route("/user/<email>")
@login_required
def for_email(email):
    if not current_user.is_admin and current_user.email.lower() != email.strip().lower():
        raise AuthorizationError("Not authorized to view these waitlist entries")
    return jsonify([entry.to_dict() for entry in WaitlistService.list_for_email(email)])


@bp.route("/<int:entry_id>/claim", methods=["PATCH", "POST"])
@login_required
@admin_required
def mark_claimed(entry_id):
    return jsonify(WaitlistService.mark_waitlist_as_claimed(entry_id).to_dict())


@bp.route("/<int:entry_id>/resend", methods=["POST"])
@login_required
@admin_required
def resend(entry_id):
    return jsonify(WaitlistService.resend_notification(entry_id).to_dict())


@bp.route("/cause/<int:cause_id>/notify", methods=["POST"])
@login_required
@admin_required
def notify(cause_id):
    count = WaitlistService.notify_waitlist_members(cause_id)
    return jsonify(notified=count)
