from flask import Blueprint, request, jsonify

from digital_library.errors import LibraryError
from digital_library.services.auth_service import AuthService

auth_bp = Blueprint("auth", __name__)


def _field(data: dict, key: str) -> str:
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"success": False, "message": "Cannot parse JSON"}), 400

    try:
        user = AuthService.register(
            username=_field(data, "username"),
            email=_field(data, "email"),
            password=_field(data, "password"),
            role="user"  # never taken from the client
        )
        return jsonify(user.to_dict()), 201
    except LibraryError as e:
        return jsonify({"success": False, "message": e.message}), e.status_code


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"success": False, "message": "Cannot parse JSON"}), 400

    try:
        token, user = AuthService.login(_field(data, "username"), _field(data, "password"))
        return jsonify({"token": token, "user": user.to_dict()})
    except LibraryError as e:
        return jsonify({"success": False, "message": e.message}), e.status_code
