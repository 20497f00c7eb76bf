from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from digital_library.services.analytics_service import AnalyticsService

analytics_bp = Blueprint("analytics", __name__)


@analytics_bp.get("/most-borrowed")
@jwt_required()
def most_borrowed():
    limit = request.args.get("limit", default=10, type=int)
    if limit is None or limit < 1 or limit > 100:
        return jsonify({"success": False, "message": "limit must be between 1 and 100"}), 400
    return jsonify(AnalyticsService.most_borrowed(limit))


@analytics_bp.get("/monthly-trends")
@jwt_required()
def monthly_trends():
    return jsonify(AnalyticsService.monthly_trends())


@analytics_bp.get("/category-distribution")
@jwt_required()
def category_distribution():
    return jsonify(AnalyticsService.category_distribution())
