from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from circulation.controllers.errors import json_error
from circulation.exceptions import CirculationError
from circulation.services.report_service import ReportService

report_bp = Blueprint("reports", __name__)


@report_bp.get("/overdue")
@jwt_required()
def overdue():
    return jsonify({"success": True, "data": ReportService.overdue()})


@report_bp.get("/due-soon")
@jwt_required()
def due_soon():
    days = request.args.get("days", type=int)
    return jsonify({"success": True, "data": ReportService.due_soon(days=days)})


@report_bp.get("/late-returns")
@jwt_required()
def late_returns():
    return jsonify({"success": True, "data": ReportService.late_returns()})


@report_bp.get("/members/<int:member_id>/summary")
@jwt_required()
def member_summary(member_id: int):
    try:
        return jsonify({"success": True, "data": ReportService.member_summary(member_id)})
    except CirculationError as e:
        return json_error(e)
