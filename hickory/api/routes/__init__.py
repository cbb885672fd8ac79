# hickory/api/routes/__init__.py

from flask import Flask

from hickory.api.routes.audit_routes import bp_audit
from hickory.api.routes.auth_routes import bp_auth
from hickory.api.routes.health_routes import bp_health
from hickory.api.routes.ticket_routes import bp_tickets


def register_routes(app: Flask, *, api_prefix: str, app_prefix: str) -> None:
    # health outside /api
    app.register_blueprint(bp_health, url_prefix=f"{app_prefix}/health")

    app.register_blueprint(bp_auth, url_prefix=f"{api_prefix}/auth")
    app.register_blueprint(bp_tickets, url_prefix=f"{api_prefix}/tickets")
    app.register_blueprint(bp_audit, url_prefix=f"{api_prefix}/auditlogs")
