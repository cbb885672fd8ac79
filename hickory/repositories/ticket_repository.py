# hickory/repositories/ticket_repository.py

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from hickory.core.base_repository import BaseRepository
from hickory.core.enums import TicketStatus
from hickory.infrastructure.database.models.ticket_model import TicketModel

TICKET_NUMBER_PREFIX = "TKT-"

_TERMINAL = (TicketStatus.CLOSED.value, TicketStatus.CANCELLED.value)


class TicketRepository(BaseRepository[TicketModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_id(self, ticket_id: int, *, refresh: bool = False) -> TicketModel | None:
        stmt = select(TicketModel).where(TicketModel.id == ticket_id)
        if refresh:
            # ignore the identity map, read what is stored now
            stmt = stmt.execution_options(populate_existing=True)
        return self._session.execute(stmt).scalar_one_or_none()

    def update_if_version(self, ticket_id: int, *, expected_version: bytes, values: dict) -> bool:
        """Compare-and-set: writes ``values`` only while the stored row version
        still equals ``expected_version``. Returns False when no row matched."""
        stmt = (
            update(TicketModel)
            .where(TicketModel.id == ticket_id, TicketModel.row_version == expected_version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        res = self._session.execute(stmt)
        return (res.rowcount or 0) == 1

    def list_by_submitter(self, submitter_id: int, *, limit: int = 50, offset: int = 0) -> list[TicketModel]:
        stmt = (
            select(TicketModel)
            .where(TicketModel.submitter_id == submitter_id)
            .order_by(TicketModel.created_at.desc(), TicketModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(self._session.execute(stmt).scalars().all())

    def list_queue(self, agent_id: int, *, limit: int = 50, offset: int = 0) -> list[TicketModel]:
        # open work: unassigned or assigned to this agent
        stmt = (
            select(TicketModel)
            .where(TicketModel.status.not_in(_TERMINAL))
            .where(or_(TicketModel.assigned_to_id.is_(None), TicketModel.assigned_to_id == agent_id))
            .order_by(TicketModel.created_at.asc(), TicketModel.id.asc())
            .limit(limit)
            .offset(offset)
        )
        return list(self._session.execute(stmt).scalars().all())

    def next_ticket_number(self) -> str:
        stmt = select(TicketModel.ticket_number).where(
            TicketModel.ticket_number.like(f"{TICKET_NUMBER_PREFIX}%")
        )
        highest = 0
        for number in self._session.execute(stmt).scalars():
            suffix = number[len(TICKET_NUMBER_PREFIX):]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return f"{TICKET_NUMBER_PREFIX}{highest + 1:05d}"
