from flask import Blueprint, jsonify
from flask_login import login_required

from changebag.models import admin_required
from changebag.services import StatsService

bp = Blueprint("stats", __name__)


@bp.route("/public")
def public():
    """Landing page numbers."""
    return jsonify(StatsService.get_public_stats())


@bp.route("/dashboard")
@login_required
@admin_required
def dashboard():
    return jsonify(StatsService.get_dashboard_stats())
