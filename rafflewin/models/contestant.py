"""Database model for raffle contestants."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String, UniqueConstraint, select
from sqlalchemy.orm import Mapped, Session, mapped_column, validates

from .base import Base
from .draw_type import normalize_draw_type
from .id_type import ID_TYPE
from rafflewin.db.utils import dt_iso


class Contestant(Base):
    """An entry in one draw pool, weighted by its ticket count."""

    __tablename__ = "contestants"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    """Identifier of the contestant; unique within a draw pool."""

    department: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    supervisor: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    tickets: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    """Selection weight. Zero means the contestant cannot win."""

    draw_type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    """Pool tag, one of :data:`rafflewin.models.draw_type.DRAW_TYPES`."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("name", "draw_type", name="uq_contestants_name_draw_type"),
    )

    def __init__(
        self,
        *,
        name: str,
        draw_type: str,
        tickets: int = 1,
        department: Optional[str] = None,
        supervisor: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> None:
        self.name = name
        self.draw_type = draw_type
        self.tickets = tickets
        self.department = department
        self.supervisor = supervisor
        if created_at is not None:
            self.created_at = created_at

    @validates("name")
    def _normalize_name(self, _key: str, value: str) -> str:
        if value is None:
            raise ValueError("Contestant name must not be None")
        normalized = value.strip()
        if not normalized:
            raise ValueError("Contestant name must not be empty")
        return normalized

    @validates("draw_type")
    def _validate_draw_type(self, _key: str, value: str) -> str:
        return normalize_draw_type(value)

    @validates("tickets")
    def _validate_tickets(self, _key: str, value: int) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError("tickets must be an integer")
        if value < 0:
            raise ValueError("tickets must not be negative")
        return value

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<Contestant(id={id}, name={name}, tickets={tickets}, draw_type={dt})>".format(
            id=self.id,
            name=self.name,
            tickets=self.tickets,
            dt=self.draw_type,
        )

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "department": self.department,
            "supervisor": self.supervisor,
            "tickets": self.tickets,
            "draw_type": self.draw_type,
            "created_at": dt_iso(self.created_at),
        }

    @classmethod
    def get_all_by_draw_type(cls, session: Session, draw_type: str) -> list["Contestant"]:
        """Return every contestant in ``draw_type`` ordered by insertion."""

        stmt = (
            select(cls)
            .where(cls.draw_type == normalize_draw_type(draw_type))
            .order_by(cls.id.asc())
        )
        return list(session.scalars(stmt).all())

    @classmethod
    def get_by_name(
        cls, session: Session, name: str, draw_type: str
    ) -> Optional["Contestant"]:
        """Return the contestant called ``name`` inside ``draw_type`` if present."""

        return session.scalar(
            select(cls).where(
                cls.name == name.strip(),
                cls.draw_type == normalize_draw_type(draw_type),
            )
        )


__all__ = ["Contestant"]
