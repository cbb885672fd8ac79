# hickory/repositories/user_repository.py

from sqlalchemy import select
from sqlalchemy.orm import Session

from hickory.core.base_repository import BaseRepository
from hickory.infrastructure.database.models.user_model import UserModel


class UserRepository(BaseRepository[UserModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_email(self, email: str) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.email == email)
        return self._session.execute(stmt).scalar_one_or_none()

    def get_by_id(self, user_id: int) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.id == user_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def get_map_by_ids(self, ids: list[int]) -> dict[int, UserModel]:
        wanted = {int(i) for i in ids if i is not None}
        if not wanted:
            return {}
        stmt = select(UserModel).where(UserModel.id.in_(wanted))
        return {int(u.id): u for u in self._session.execute(stmt).scalars().all()}
