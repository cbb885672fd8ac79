# hickory/repositories/comment_repository.py

from sqlalchemy import select
from sqlalchemy.orm import Session

from hickory.core.base_repository import BaseRepository
from hickory.infrastructure.database.models.comment_model import CommentModel


class CommentRepository(BaseRepository[CommentModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def list_by_ticket(self, ticket_id: int, *, include_internal: bool) -> list[CommentModel]:
        stmt = select(CommentModel).where(CommentModel.ticket_id == ticket_id)
        if not include_internal:
            stmt = stmt.where(CommentModel.is_internal.is_(False))
        stmt = stmt.order_by(CommentModel.created_at.asc(), CommentModel.id.asc())
        return list(self._session.execute(stmt).scalars().all())
