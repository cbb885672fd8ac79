# hickory/core/audit/audit_entities.py
from enum import Enum


class AuditEntity(str, Enum):
    TICKET = "ticket"
    COMMENT = "comment"
    USER = "user"
    AUTH = "auth"
