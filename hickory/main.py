# hickory/main.py
from __future__ import annotations

import uuid

import structlog
from flask import Flask, request
from flask_cors import CORS

from hickory.api.middlewares.error_handler import register_error_handlers
from hickory.api.realtime.socket_handlers import register_socket_handlers
from hickory.api.routes import register_routes
from hickory.config.flask_config import configure_app
from hickory.config.logging_config import bind_request_context, clear_request_context, configure_logging
from hickory.config.settings import settings
from hickory.infrastructure.events.event_bus import event_bus
from hickory.infrastructure.realtime.socketio_server import socketio
from hickory.infrastructure.realtime.socketio_ticket_notifier import SocketIOTicketNotifier

import hickory.infrastructure.database.models  # noqa: F401

logger = structlog.get_logger(__name__)

_notifier_registered = False


# -------------------------
# Prefixes (subpath)
# -------------------------
APP_PREFIX = settings.app_prefix.rstrip("/")
API_PREFIX = f"{APP_PREFIX}/api"
SOCKET_PREFIX = f"{APP_PREFIX}/socket.io"


def _register_notifier() -> None:
    global _notifier_registered
    if _notifier_registered:
        return
    SocketIOTicketNotifier().register(event_bus)
    _notifier_registered = True


def create_app() -> Flask:
    configure_logging()

    app = Flask(__name__)

    # CORS before routes handle OPTIONS
    CORS(
        app,
        resources={rf"{API_PREFIX}/*": {"origins": settings.cors_origins}},
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    )

    configure_app(app)

    @app.before_request
    def _bind_request_id():
        clear_request_context()
        bind_request_context(
            request_id=request.headers.get("X-Request-ID") or uuid.uuid4().hex,
            path=request.path,
        )

    register_routes(app, api_prefix=API_PREFIX, app_prefix=APP_PREFIX)

    register_error_handlers(app)

    socketio.init_app(app, path=SOCKET_PREFIX)
    register_socket_handlers()
    _register_notifier()

    logger.info("app_created", environment=settings.environment, api_prefix=API_PREFIX)
    return app
