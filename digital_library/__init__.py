import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from digital_library.config import Config
from digital_library.errors import LibraryError
from digital_library.extensions import db, migrate, jwt
from digital_library.database import wait_for_database, register_commands


def _register_jwt_handlers():
    @jwt.unauthorized_loader
    def _missing_token(reason):
        return jsonify({"success": False, "message": "Missing or malformed JWT"}), 400

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return jsonify({"success": False, "message": "Invalid or expired JWT"}), 401

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return jsonify({"success": False, "message": "Invalid or expired JWT"}), 401


def _register_error_handlers(app):
    @app.errorhandler(LibraryError)
    def _library_error(e):
        return jsonify({"success": False, "message": e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def _http_error(e):
        return jsonify({"success": False, "message": e.description}), e.code

    @app.errorhandler(Exception)
    def _unhandled(e):
        app.logger.exception(f"[http] Unhandled error on {request.method} {request.path}: {e}")
        return jsonify({"success": False, "message": "Internal server error"}), 500


def create_app(config_object=None, overrides=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    if not app.debug and not app.testing:
        logging.basicConfig(
            level=app.config.get("LOG_LEVEL", "INFO"),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    # 1) db first (db.engine / db.session)
    db.init_app(app)

    # models on db.metadata before migrate / create_all
    from digital_library.models import book, lending_record, user  # noqa: F401

    # 2) storage must answer before we serve
    wait_for_database(app)

    # 3) other extensions
    migrate.init_app(app, db)
    jwt.init_app(app)
    _register_jwt_handlers()

    # 4) API blueprints, all under /api
    from digital_library.controllers.auth_controller import auth_bp
    from digital_library.controllers.book_controller import book_bp
    from digital_library.controllers.lending_controller import lending_bp
    from digital_library.controllers.analytics_controller import analytics_bp
    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(book_bp, url_prefix="/api/books")
    app.register_blueprint(lending_bp, url_prefix="/api/lending")
    app.register_blueprint(analytics_bp, url_prefix="/api/analytics")

    _register_error_handlers(app)
    register_commands(app)

    @app.after_request
    def _log_request(response):
        app.logger.info(f"[http] {request.method} {request.path} -> {response.status_code}")
        return response

    @app.get("/health")
    def health():
        return "OK"

    return app
