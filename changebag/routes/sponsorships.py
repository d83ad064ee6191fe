from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from changebag.errors import AuthorizationError, ValidationError
from changebag.models import admin_required, current_user_id
from changebag.services import SponsorshipService
from changebag.services import pricing
from changebag.utils import page_params

bp = Blueprint("sponsorships", __name__)


@bp.route("/", methods=["POST"])
def create():
    """Create a sponsorship. Anonymous sponsors are allowed."""
    data = request.get_json(silent=True) or {}
    sponsorship = SponsorshipService.create_sponsorship(data, sponsor_id=current_user_id())
    return jsonify(sponsorship.to_dict()), 201


@bp.route("/quote")
def quote():
    return jsonify(pricing.quote(request.args.get("quantity")))


@bp.route("/")
@login_required
@admin_required
def index():
    page, limit = page_params(
        request.args, current_app.config["PAGE_SIZE"], current_app.config["MAX_PAGE_SIZE"]
    )
    items, pagination = SponsorshipService.list_sponsorships(
        status=request.args.get("status"), page=page, limit=limit
    )
    return jsonify(sponsorships=[s.to_dict() for s in items], pagination=pagination)


@bp.route("/pending")
@login_required
@admin_required
def pending():
    return jsonify([s.to_dict() for s in SponsorshipService.list_pending()])


@bp.route("/mine")
@login_required
def mine():
    return jsonify([s.to_dict() for s in SponsorshipService.list_for_user(current_user)])


@bp.route("/<int:sponsorship_id>")
@login_required
def detail(sponsorship_id):
    sponsorship = SponsorshipService.get_sponsorship(sponsorship_id)
    if not current_user.is_admin and sponsorship.sponsor_id != current_user.id:
        raise AuthorizationError("Not authorized to view this sponsorship")
    return jsonify(sponsorship.to_dict())


@bp.route("/<int:sponsorship_id>", methods=["PUT", "PATCH"])
@login_required
@admin_required
def update(sponsorship_id):
    data = request.get_json(silent=True) or {}
    return jsonify(SponsorshipService.update_sponsorship(sponsorship_id, data).to_dict())


@bp.route("/<int:sponsorship_id>", methods=["DELETE"])
@login_required
@admin_required
def delete(sponsorship_id):
    SponsorshipService.delete_sponsorship(sponsorship_id)
    return jsonify(message="Sponsorship removed")


@bp.route("/<int:sponsorship_id>/approve", methods=["PATCH", "POST"])
@login_required
@admin_required
def approve(sponsorship_id):
    sponsorship = SponsorshipService.approve_sponsorship(sponsorship_id, current_user.id)
    return jsonify(sponsorship.to_dict())


@bp.route("/<int:sponsorship_id>/reject", methods=["PATCH", "POST"])
@login_required
@admin_required
def reject(sponsorship_id):
    data = request.get_json(silent=True) or {}
    sponsorship = SponsorshipService.reject_sponsorship(sponsorship_id, data.get("reason"))
    return jsonify(sponsorship.to_dict())


@bp.route("/<int:sponsorship_id>/end", methods=["PATCH", "POST"])
@login_required
@admin_required
def end_campaign(sponsorship_id):
    sponsorship = SponsorshipService.end_campaign(sponsorship_id, current_user.id)
    return jsonify(sponsorship.to_dict())


@bp.route("/reupload", methods=["POST"])
def reupload():
    """Public endpoint behind the signed link in the rejection email."""
    data = request.get_json(silent=True) or {}
    token = data.get("token")
    if not token:
        raise ValidationError("Reupload token is required", missing_fields=["token"])

    sponsorship_id = SponsorshipService.load_reupload_token(token)
    sponsorship = SponsorshipService.reupload_logo(
        sponsorship_id, data.get("logoUrl"), data.get("logoPosition")
    )
    return jsonify(sponsorship.to_dict())
