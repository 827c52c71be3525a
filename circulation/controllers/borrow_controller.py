from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from circulation.controllers.errors import json_error
from circulation.exceptions import CirculationError
from circulation.services.circulation_service import CirculationService
from circulation.services.report_service import ReportService
from circulation.services.unit_of_work import retry_on_conflict

borrow_bp = Blueprint("borrow", __name__)


def _borrow_json(b):
    return {
        "id": b.id,
        "member_id": b.member_id,
        "copy_id": b.copy_id,
        "employee_id": b.employee_id,
        "serial_number": b.serial_number,
        "borrow_date": b.borrow_date.isoformat(),
        "expected_return_date": b.expected_return_date.isoformat(),
        "actual_return_date": b.actual_return_date.isoformat() if b.actual_return_date else None,
    }


@borrow_bp.post("/")
@jwt_required()
def borrow_book():
    data = request.get_json(silent=True) or {}
    try:
        member_id = int(data["member_id"])
        copy_id = int(data["copy_id"])
    except (KeyError, TypeError, ValueError):
        return jsonify({"success": False, "message": "member_id and copy_id are required"}), 400

    employee_id = int(get_jwt_identity())
    try:
        b = retry_on_conflict(CirculationService.borrow_book, member_id, copy_id, employee_id)
        return jsonify({"success": True, "data": _borrow_json(b)}), 201
    except CirculationError as e:
        return json_error(e)


@borrow_bp.post("/return/<int:borrow_id>")
@jwt_required()
def return_book(borrow_id):
    try:
        result = retry_on_conflict(CirculationService.return_book, borrow_id)
    except CirculationError as e:
        return json_error(e)

    payment = result.payment
    fulfilled = result.fulfilled_borrow
    return jsonify({
        "success": True,
        "data": {
            "borrow": _borrow_json(result.borrow),
            "copy_available": result.copy_available,
            "payment": {
                "id": payment.id,
                "amount": str(payment.amount),
                "fine_amount": str(payment.fine_amount),
                "total_amount": str(payment.total_amount),
                "status": payment.status.value,
            } if payment else None,
            "fulfilled_borrow": _borrow_json(fulfilled) if fulfilled else None,
            "fulfillment_error": result.fulfillment_error,
        }
    })


@borrow_bp.get("/member/<int:member_id>")
@jwt_required()
def member_history(member_id):
    try:
        return jsonify({"success": True, "data": ReportService.member_history(member_id)})
    except CirculationError as e:
        return json_error(e)
