from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from changebag.errors import ValidationError
from changebag.models import admin_required
from changebag.services import ClaimService
from changebag.utils import page_params

bp = Blueprint("claims", __name__)


@bp.route("/", methods=["POST"])
def create():
    claim = ClaimService.create_claim(request.get_json(silent=True) or {})
    return jsonify(claim.to_dict()), 201


@bp.route("/magic-link", methods=["POST"])
def create_from_magic_link():
    """Claim a tote with the token from a waitlist notification."""
    data = request.get_json(silent=True) or {}
    token = data.pop("token", None)
    if not token:
        raise ValidationError("Magic link token is required", missing_fields=["token"])
    claim = ClaimService.create_claim_from_magic_link(token, data)
    return jsonify(claim.to_dict()), 201


@bp.route("/check")
def check():
    email = request.args.get("email")
    cause_id = request.args.get("causeId", type=int)
    if not email or not cause_id:
        raise ValidationError("Email and causeId are required",
                              missing_fields=[f for f, v in (("email", email), ("causeId", cause_id)) if not v])

    claim = ClaimService.check_existing_claim(email, cause_id)
    return jsonify(exists=claim is not None, claim=claim.to_dict() if claim else None)


@bp.route("/dashboard/claimer")
@login_required
def claimer_dashboard():
    return jsonify(ClaimService.claimer_dashboard(current_user.email))


@bp.route("/recent")
@login_required
@admin_required
def recent():
    page, limit = page_params(
        request.args, current_app.config["PAGE_SIZE"], current_app.config["MAX_PAGE_SIZE"]
    )
    claims, pagination = ClaimService.list_claims(
        page=page,
        limit=limit,
        source=request.args.get("source"),
        status=request.args.get("status"),
    )
    return jsonify(claims=[claim.to_dict() for claim in claims], pagination=pagination)


@bp.route("/stats")
@login_required
@admin_required
def stats():
    return jsonify(ClaimService.claims_stats())


@bp.route("/<int:claim_id>")
@login_required
@admin_required
def detail(claim_id):
    return jsonify(ClaimService.get_claim(claim_id).to_dict())


@bp.route("/<int:claim_id>/status", methods=["PATCH"])
@login_required
@admin_required
def update_status(claim_id):
    data = request.get_json(silent=True) or {}
    if not data.get("status"):
        raise ValidationError("Status is required", missing_fields=["status"])
    claim = ClaimService.update_claim_status(claim_id, data["status"], data)
    return jsonify(claim.to_dict())


@bp.route("/<int:claim_id>/verify-qr", methods=["POST"])
@login_required
@admin_required
def verify_qr(claim_id):
    return jsonify(ClaimService.verify_qr_code_claim(claim_id).to_dict())
