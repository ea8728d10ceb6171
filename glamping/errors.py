from flask import jsonify
from sqlalchemy.exc import IntegrityError


class AppError(Exception):
    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(AppError):
    status_code = 404


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(err):
        return jsonify({"error": err.message}), err.status_code

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(_err):
        app.logger.warning("Database integrity error")
        return jsonify({"error": "Conflict. Resource already exists."}), 409

    @app.errorhandler(400)
    def bad_request(_err):
        return jsonify({"error": "Bad request"}), 400

    @app.errorhandler(401)
    def unauthorized(_err):
        return jsonify({"error": "Unauthorized"}), 401

    @app.errorhandler(403)
    def forbidden(_err):
        return jsonify({"error": "Forbidden"}), 403

    @app.errorhandler(404)
    def not_found(_err):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(500)
    def server_error(_err):
        app.logger.exception("Internal server error")
        return jsonify({"error": "Internal server error"}), 500
