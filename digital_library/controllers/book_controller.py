# digital_library/controllers/book_controller.py

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from digital_library.errors import LibraryError
from digital_library.services.book_service import BookService

book_bp = Blueprint("books", __name__)


def _available_filter(raw):
    if raw == "true":
        return True
    if raw == "false":
        return False
    return None


@book_bp.get("/")
@jwt_required()
def list_books():
    books = BookService.list_books(
        search=request.args.get("search") or None,
        category=request.args.get("category") or None,
        author=request.args.get("author") or None,
        available=_available_filter(request.args.get("available")),
    )
    return jsonify([b.to_dict() for b in books])


@book_bp.get("/<int:book_id>")
@jwt_required()
def get_book(book_id: int):
    try:
        return jsonify(BookService.get_book(book_id).to_dict())
    except LibraryError as e:
        return jsonify({"success": False, "message": e.message}), e.status_code


@book_bp.post("/")
@jwt_required()
def create_book():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"success": False, "message": "Cannot parse JSON"}), 400
    try:
        b = BookService.create_book(data)
        return jsonify(b.to_dict()), 201
    except LibraryError as e:
        return jsonify({"success": False, "message": e.message}), e.status_code


@book_bp.put("/<int:book_id>")
@jwt_required()
def update_book(book_id: int):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"success": False, "message": "Cannot parse JSON"}), 400
    try:
        b = BookService.update_book(book_id, data)
        return jsonify(b.to_dict())
    except LibraryError as e:
        return jsonify({"success": False, "message": e.message}), e.status_code


@book_bp.delete("/<int:book_id>")
@jwt_required()
def delete_book(book_id: int):
    try:
        deleted_id = BookService.delete_book(book_id)
        return jsonify({"success": True, "message": "Book deleted successfully", "id": deleted_id})
    except LibraryError as e:
        return jsonify({"success": False, "message": e.message}), e.status_code
