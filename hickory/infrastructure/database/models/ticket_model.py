# hickory/infrastructure/database/models/ticket_model.py

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hickory.infrastructure.database.base_model import BaseModel, BigIntPk


class TicketModel(BaseModel):
    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(BigIntPk, primary_key=True)
    ticket_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[str] = mapped_column(String(20), nullable=False)
    priority: Mapped[str] = mapped_column(String(20), nullable=False)

    submitter_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    assigned_to_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    closed_at: Mapped[datetime] = mapped_column(DateTime, nullable=True)

    resolution_notes: Mapped[str] = mapped_column(Text, nullable=True)

    # optimistic concurrency witness, replaced on every successful mutation
    row_version: Mapped[bytes] = mapped_column(LargeBinary(8), nullable=False)
