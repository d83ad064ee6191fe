from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from changebag.models import CauseStatus
from changebag.services import CauseService

bp = Blueprint("causes", __name__)


def _flag(value):
    if value is None or value == "":
        return None
    return value.lower() in ("1", "true", "yes")


@bp.route("/")
def index():
    """List causes. Anonymous visitors only see approved ones."""
    status = request.args.get("status")
    if not (current_user.is_authenticated and current_user.is_admin) and not status:
        status = CauseStatus.APPROVED

    causes = CauseService.list_causes(
        status=status,
        category=request.args.get("category"),
        is_online=_flag(request.args.get("isOnline")),
        search=(request.args.get("search") or "").strip() or None,
    )
    return jsonify(causes)


@bp.route("/<int:cause_id>")
def detail(cause_id):
    return jsonify(CauseService.get_cause_detail(cause_id))


@bp.route("/", methods=["POST"])
@login_required
def create():
    cause = CauseService.create_cause(request.get_json(silent=True) or {}, current_user)
    return jsonify(cause.to_dict()), 201


@bp.route("/<int:cause_id>", methods=["PUT", "PATCH"])
@login_required
def update(cause_id):
    cause = CauseService.update_cause(cause_id, request.get_json(silent=True) or {}, current_user)
    return jsonify(cause.to_dict())


@bp.route("/<int:cause_id>", methods=["DELETE"])
@login_required
def delete(cause_id):
    CauseService.delete_cause(cause_id, current_user)
    return jsonify(message="Cause removed")


@bp.route("/<int:cause_id>/status", methods=["PATCH"])
@login_required
def update_status(cause_id):
    data = request.get_json(silent=True) or {}
    cause = CauseService.update_status(cause_id, data.get("status"), current_user)
    return jsonify(cause.to_dict())


@bp.route("/mine")
@login_required
def mine():
    causes = CauseService.causes_by_user(current_user.id)
    return jsonify([cause.to_dict() for cause in causes])


@bp.route("/sponsor/claim-stats")
@login_required
def sponsor_claim_stats():
    return jsonify(CauseService.sponsor_causes_with_claim_stats(current_user.id))
