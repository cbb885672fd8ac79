# hickory/infrastructure/database/models/__init__.py
# importing the package registers every table on BaseModel.metadata

from hickory.infrastructure.database.models.audit_log_model import AuditLogModel
from hickory.infrastructure.database.models.comment_model import CommentModel
from hickory.infrastructure.database.models.refresh_token_model import RefreshTokenModel
from hickory.infrastructure.database.models.ticket_model import TicketModel
from hickory.infrastructure.database.models.user_model import UserModel

__all__ = [
    "AuditLogModel",
    "CommentModel",
    "RefreshTokenModel",
    "TicketModel",
    "UserModel",
]
