from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from circulation.controllers.errors import json_error
from circulation.exceptions import CirculationError
from circulation.services.reservation_service import ReservationService

reservation_bp = Blueprint("reservations", __name__)


def _reservation_json(r):
    return {
        "id": r.id,
        "book_id": r.book_id,
        "member_id": r.member_id,
        "reservation_date": r.reservation_date.isoformat(),
    }


@reservation_bp.post("/")
@jwt_required()
def reserve():
    data = request.get_json(silent=True) or {}
    try:
        book_id = int(data["book_id"])
        member_id = int(data["member_id"])
    except (KeyError, TypeError, ValueError):
        return jsonify({"success": False, "message": "book_id and member_id are required"}), 400

    try:
        r = ReservationService.enqueue(book_id, member_id)
        return jsonify({"success": True, "data": _reservation_json(r)}), 201
    except CirculationError as e:
        return json_error(e)


@reservation_bp.get("/book/<int:book_id>")
@jwt_required()
def queue(book_id):
    rows = ReservationService.peek(book_id)
    return jsonify({"success": True, "data": [
        dict(_reservation_json(r), position=i + 1) for i, r in enumerate(rows)
    ]})
