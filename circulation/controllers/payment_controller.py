# circulation/controllers/payment_controller.py

from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from circulation.controllers.errors import json_error
from circulation.exceptions import CirculationError
from circulation.services.billing_service import BillingService
from circulation.services.report_service import ReportService

payment_bp = Blueprint("payments", __name__, url_prefix="/payments")


@payment_bp.get("/unpaid")
@jwt_required()
def unpaid():
    return jsonify({"success": True, "data": ReportService.unpaid_payments()})


@payment_bp.post("/pay/<int:payment_id>")
@jwt_required()
def pay(payment_id: int):
    try:
        p = BillingService.mark_paid(payment_id)
    except CirculationError as e:
        return json_error(e)

    return jsonify({"success": True, "data": {"id": p.id, "status": p.status.value}})
