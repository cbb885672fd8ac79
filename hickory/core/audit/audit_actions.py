# hickory/core/audit/audit_actions.py
from enum import Enum


class AuditAction(str, Enum):
    CREATED = "CREATED"
    ASSIGNED = "ASSIGNED"
    STATUS_CHANGED = "STATUS_CHANGED"
    PRIORITY_CHANGED = "PRIORITY_CHANGED"
    CLOSED = "CLOSED"

    REGISTER = "REGISTER"
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    REFRESH_SUCCESS = "REFRESH_SUCCESS"
    REFRESH_FAILED = "REFRESH_FAILED"
    LOGOUT = "LOGOUT"
