from flask import Blueprint, g, jsonify, request
from flask_login import login_required

from changebag.errors import ValidationError
from changebag.models import CauseStatus, admin_required, api_key_required
from changebag.services import CauseService, PartnerService

bp = Blueprint("partner", __name__)


@bp.route("/claim", methods=["POST"])
@api_key_required
def claim():
    """File a claim on behalf of the partner's customer."""
    filed = PartnerService.create_claim(g.api_partner, request.get_json(silent=True) or {})
    return jsonify(filed.to_dict()), 201


@bp.route("/causes")
@api_key_required
def causes():
    return jsonify(CauseService.list_causes(status=CauseStatus.APPROVED))


@bp.route("/partners")
@login_required
@admin_required
def list_partners():
    return jsonify([partner.to_dict() for partner in PartnerService.list_partners()])


@bp.route("/partners", methods=["POST"])
@login_required
@admin_required
def create_partner():
    partner = PartnerService.create_partner(request.get_json(silent=True) or {})
    return jsonify(partner.to_dict(include_key=True)), 201


@bp.route("/partners/<int:partner_id>", methods=["PATCH"])
@login_required
@admin_required
def update_partner(partner_id):
    data = request.get_json(silent=True) or {}
    if not isinstance(data.get("isActive"), bool):
        raise ValidationError("isActive must be true or false", invalid_fields={"isActive": data.get("isActive")})
    return jsonify(PartnerService.set_active(partner_id, data["isActive"]).to_dict())


@bp.route("/partners/<int:partner_id>/rotate-key", methods=["POST"])
@login_required
@admin_required
def rotate_key(partner_id):
    return jsonify(PartnerService.rotate_key(partner_id).to_dict(include_key=True))
