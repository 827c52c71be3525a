from flask import jsonify

from circulation.exceptions import CirculationError


def json_error(e: CirculationError):
    return jsonify({"success": False, "error": type(e).__name__, "message": str(e)}), e.status_code
