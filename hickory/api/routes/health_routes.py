# hickory/api/routes/health_routes.py
import structlog
from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from hickory.config.settings import settings
from hickory.infrastructure.database.session import db_session

logger = structlog.get_logger(__name__)

bp_health = Blueprint("health", __name__)


@bp_health.get("")
def health():
    return jsonify({"status": "ok", "service": "hickory-api", "environment": settings.environment}), 200


@bp_health.get("/db")
def health_db():
    try:
        with db_session() as session:
            session.execute(text("select 1"))
            dialect = session.get_bind().dialect.name
    except SQLAlchemyError:
        logger.exception("db_health_failed")
        return jsonify({"db": "unavailable"}), 503
    return jsonify({"db": "ok", "dialect": dialect}), 200
