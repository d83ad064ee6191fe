from flask import Blueprint, jsonify, request
from flask_login import login_required

from changebag.models import admin_required
from changebag.services import DistributionService

bp = Blueprint("distribution", __name__)


@bp.route("/settings")
def settings():
    """Countries, cities, categories and points for the sponsorship wizard."""
    return jsonify(DistributionService.get_settings())


@bp.route("/points/<int:city_id>/<int:category_id>")
def points(city_id, category_id):
    points = DistributionService.points_for(city_id, category_id)
    return jsonify([point.to_dict() for point in points])


@bp.route("/<kind>", methods=["POST"])
@login_required
@admin_required
def create(kind):
    record = DistributionService.create_record(kind, request.get_json(silent=True) or {})
    return jsonify(record.to_dict()), 201


@bp.route("/<kind>/<int:record_id>", methods=["PUT", "PATCH"])
@login_required
@admin_required
def update(kind, record_id):
    record = DistributionService.update_record(kind, record_id, request.get_json(silent=True) or {})
    return jsonify(record.to_dict())


@bp.route("/points/<int:point_id>", methods=["DELETE"])
@login_required
@admin_required
def delete_point(point_id):
    DistributionService.delete_point(point_id)
    return jsonify(success=True)
