from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from digital_library.errors import LibraryError
from digital_library.services.lending_service import LendingService

lending_bp = Blueprint("lending", __name__)


def _error(e: LibraryError):
    return jsonify({"success": False, "message": e.message}), e.status_code


@lending_bp.post("/lend")
@jwt_required()
def lend_book():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"success": False, "message": "Cannot parse JSON"}), 400
    try:
        record = LendingService.lend(data.get("book_id"), data.get("borrower"))
        return jsonify(record.to_dict()), 201
    except LibraryError as e:
        return _error(e)


@lending_bp.route("/return/<int:record_id>", methods=["POST", "PUT"])
@jwt_required()
def return_book(record_id: int):
    try:
        LendingService.return_book(record_id)
        return jsonify({"success": True, "message": "Book returned successfully"})
    except LibraryError as e:
        return _error(e)


@lending_bp.delete("/<int:record_id>")
@jwt_required()
def delete_record(record_id: int):
    try:
        LendingService.delete_record(record_id)
        return jsonify({"success": True, "message": "Lending record deleted successfully"})
    except LibraryError as e:
        return _error(e)


@lending_bp.get("/")
@jwt_required()
def list_records():
    records = LendingService.list_records(
        search=request.args.get("search") or None,
        borrower=request.args.get("borrower") or None,
        status=request.args.get("status") or None,
        book_title=request.args.get("bookTitle") or None,
    )
    return jsonify(records)
