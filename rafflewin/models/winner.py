"""Database model for drawn raffle winners."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Mapping, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, validates

from .base import Base
from .draw_type import normalize_draw_type
from .id_type import ID_TYPE
from rafflewin.db.utils import dt_iso, parse_iso

if TYPE_CHECKING:
    from .contestant import Contestant


class Winner(Base):
    """Snapshot of a contestant at the moment it was drawn.

    Rows are never rewritten after the draw apart from the sync bookkeeping
    (``synced`` and ``remote_id``). ``name`` is unique across every pool so a
    contestant can only ever win once.
    """

    __tablename__ = "winners"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    contestant_id: Mapped[Optional[int]] = mapped_column(
        ID_TYPE,
        ForeignKey("contestants.id", ondelete="SET NULL"),
        nullable=True,
    )
    """Contestant row the winner was drawn from, when it exists locally."""

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    supervisor: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    tickets: Mapped[int] = mapped_column(Integer, nullable=False)

    draw_type: Mapped[str] = mapped_column(String(32), nullable=False)
    """Pool the winner was drawn from."""

    draw_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    """Time of selection."""

    synced: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    """``True`` once the row is known to exist in the remote store."""

    remote_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    """Identifier assigned by the remote store, if reported."""

    contestant: Mapped[Optional["Contestant"]] = relationship("Contestant")

    __table_args__ = (
        UniqueConstraint("name", name="uq_winners_name"),
        Index("ix_winners_draw_type_draw_date", "draw_type", "draw_date"),
    )

    def __init__(
        self,
        *,
        name: str,
        tickets: int,
        draw_type: str,
        department: Optional[str] = None,
        supervisor: Optional[str] = None,
        draw_date: Optional[datetime] = None,
        contestant: Optional["Contestant"] = None,
        contestant_id: Optional[int] = None,
        synced: bool = False,
        remote_id: Optional[str] = None,
    ) -> None:
        self.name = name
        self.tickets = tickets
        self.draw_type = draw_type
        self.department = department
        self.supervisor = supervisor
        if draw_date is not None:
            self.draw_date = draw_date
        if contestant is not None:
            self.contestant = contestant
        if contestant_id is not None:
            self.contestant_id = contestant_id
        self.synced = synced
        self.remote_id = remote_id

    @validates("name")
    def _normalize_name(self, _key: str, value: str) -> str:
        if value is None or not value.strip():
            raise ValueError("Winner name must not be empty")
        return value.strip()

    @validates("draw_type")
    def _validate_draw_type(self, _key: str, value: str) -> str:
        return normalize_draw_type(value)

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<Winner(id={id}, name={name}, draw_type={dt}, synced={synced})>".format(
            id=self.id,
            name=self.name,
            dt=self.draw_type,
            synced=self.synced,
        )

    @classmethod
    def from_contestant(
        cls,
        contestant: "Contestant",
        draw_type: str,
        *,
        draw_date: Optional[datetime] = None,
    ) -> "Winner":
        """Build an unsaved winner that snapshots ``contestant``'s fields."""

        return cls(
            name=contestant.name,
            department=contestant.department,
            supervisor=contestant.supervisor,
            tickets=contestant.tickets,
            draw_type=draw_type,
            draw_date=draw_date or datetime.now(timezone.utc),
            contestant_id=getattr(contestant, "id", None),
        )

    @classmethod
    def from_remote(cls, row: Mapping[str, Any]) -> "Winner":
        """Build an unsaved, already-synced winner from a remote store row.

        Raises
        ------
        ValueError
            If the row is missing ``name``, ``draw_type`` or ``tickets``.
        """

        for key in ("name", "draw_type", "tickets"):
            if row.get(key) is None:
                raise ValueError(f"Remote winner row is missing '{key}'")
        remote_id = row.get("id")
        return cls(
            name=str(row["name"]),
            department=row.get("department"),
            supervisor=row.get("supervisor"),
            tickets=int(row["tickets"]),
            draw_type=str(row["draw_type"]),
            draw_date=parse_iso(row.get("draw_date")),
            synced=True,
            remote_id=str(remote_id) if remote_id is not None else None,
        )

    def to_json(self) -> dict:
        """Return the columns shared with the remote store and the CSV export."""
        return {
            "name": self.name,
            "department": self.department,
            "supervisor": self.supervisor,
            "tickets": self.tickets,
            "draw_type": self.draw_type,
            "draw_date": dt_iso(self.draw_date),
        }

    @classmethod
    def get_all(
        cls, session: Session, draw_type: Optional[str] = None
    ) -> list["Winner"]:
        """Return winners ordered by draw date, optionally limited to one pool."""

        stmt = select(cls)
        if draw_type is not None:
            stmt = stmt.where(cls.draw_type == normalize_draw_type(draw_type))
        stmt = stmt.order_by(cls.draw_date.asc(), cls.id.asc())
        return list(session.scalars(stmt).all())

    @classmethod
    def get_by_name(cls, session: Session, name: str) -> Optional["Winner"]:
        """Return the winner called ``name`` in any pool."""
        return session.scalar(select(cls).where(cls.name == name.strip()))

    @classmethod
    def get_unsynced(cls, session: Session) -> list["Winner"]:
        stmt = (
            select(cls)
            .where(cls.synced.is_(False))
            .order_by(cls.draw_date.asc(), cls.id.asc())
        )
        return list(session.scalars(stmt).all())


__all__ = ["Winner"]
