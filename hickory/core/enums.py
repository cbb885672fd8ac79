# hickory/core/enums.py
from enum import Enum


class UserRole(str, Enum):
    END_USER = "EndUser"
    AGENT = "Agent"
    ADMINISTRATOR = "Administrator"


STAFF_ROLES = (UserRole.AGENT, UserRole.ADMINISTRATOR)


class TicketStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "InProgress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"
    CANCELLED = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (TicketStatus.CLOSED, TicketStatus.CANCELLED)


class TicketPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"
