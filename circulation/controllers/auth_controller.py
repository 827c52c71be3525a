from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity, get_jwt

from circulation.services.auth_service import AuthService
from circulation.repositories.librarian_repo import LibrarianRepo

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/login", endpoint="auth_login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip()
    password = (data.get("password") or "").strip()

    if not email or not password:
        return jsonify({"success": False, "message": "email and password are required"}), 400

    try:
        token, librarian = AuthService.login(email, password)
        return jsonify({
            "success": True,
            "access_token": token,
            "librarian": {"id": librarian.id, "fullname": librarian.fullname, "role": librarian.role}
        })
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 401


@auth_bp.get("/me", endpoint="auth_me")
@jwt_required()
def me():
    librarian_id = int(get_jwt_identity())
    claims = get_jwt()
    librarian = LibrarianRepo.get_by_id(librarian_id)
    if not librarian:
        return jsonify({"success": False, "message": "Librarian not found"}), 404

    return jsonify({
        "success": True,
        "librarian": {
            "id": librarian.id,
            "fullname": librarian.fullname,
            "email": librarian.email,
            "role": claims.get("role", librarian.role)
        }
    })
