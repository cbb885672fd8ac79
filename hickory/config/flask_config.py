# hickory/config/flask_config.py
from flask import Flask

from hickory.config.settings import settings


def configure_app(app: Flask) -> None:
    app.config["DEBUG"] = settings.debug
    # oversized bodies are rejected with 413 before any handler parses them
    app.config["MAX_CONTENT_LENGTH"] = settings.max_request_bytes
    # keep the field order of the response schemas
    app.json.sort_keys = False
