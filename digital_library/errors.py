"""Error taxonomy shared by services and controllers.

Services raise these; controllers turn them into
``{"success": False, "message": ...}`` with ``status_code``.
"""


class LibraryError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(LibraryError):
    status_code = 400


class Unauthorized(LibraryError):
    status_code = 401


class NotFound(LibraryError):
    status_code = 404


class Conflict(LibraryError):
    status_code = 409


class TransientError(LibraryError):
    """Storage unreachable or deadline exceeded; the caller may retry."""
    status_code = 503


class InternalError(LibraryError):
    status_code = 500
