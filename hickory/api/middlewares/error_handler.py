# hickory/api/middlewares/error_handler.py
import structlog
from flask import Flask, jsonify
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

from hickory.config.settings import settings
from hickory.core.exceptions import AppError

logger = structlog.get_logger(__name__)


def _body(message: str, code: str):
    return jsonify({"error": message, "code": code})


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        logger.info("request_failed", code=err.code, status=err.status_code)
        return _body(str(err), err.code), err.status_code

    @app.errorhandler(PydanticValidationError)
    def handle_validation_error(err: PydanticValidationError):
        first = err.errors()[0] if err.errors() else {}
        loc = ".".join(str(p) for p in first.get("loc", ()))
        msg = first.get("msg", "Invalid input")
        return _body(f"{loc}: {msg}" if loc else msg, "validation_error"), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return _body(err.description, err.name.lower().replace(" ", "_")), err.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        logger.exception("unhandled_error")

        if settings.debug:
            return _body(str(err), "internal_error"), 500

        return _body("Internal server error", "internal_error"), 500
