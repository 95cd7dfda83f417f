"""
Event Models

Festival events, the assignment tables linking students and accompanists to
them, and the per-event participant tables (one table per festival event).

The per-event tables share one layout and are generated from
``FESTIVAL_EVENT_CODES``; ``catalog.py`` registers each of them as a
participation source.
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from fest_api.core.database import Base


class EventType(str, enum.Enum):
    """How a student is linked to an event."""

    PARTICIPATING = "participating"
    ACCOMPANYING = "accompanying"


class PersonType(str, enum.Enum):
    """Kind of person in participant tables and the final snapshot."""

    STUDENT = "student"
    ACCOMPANIST = "accompanist"


# Festival events that keep their own participant table (event_<code>)
FESTIVAL_EVENT_CODES: tuple[str, ...] = (
    "mime",
    "skit",
    "one_act_play",
    "debate",
    "elocution",
    "quiz",
    "classical_vocal_solo",
    "light_vocal_solo",
    "western_vocal_solo",
    "group_song_indian",
    "group_song_western",
    "folk_orchestra",
    "classical_instrumental_percussion",
    "classical_instrumental_non_percussion",
    "light_instrumental_solo",
    "western_instrumental_solo",
    "classical_dance",
    "folk_dance",
    "mimicry",
    "on_spot_painting",
    "collage",
    "poster_making",
    "clay_modelling",
    "cartooning",
    "rangoli",
    "installation",
    "spot_photography",
)


class Event(Base):
    """A festival event and its per-college participant limit."""

    __tablename__ = "events"

    event_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    event_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    max_participants_per_college: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_accompanists_per_college: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class StudentEventParticipation(Base):
    """A student assigned to an event, either participating or accompanying."""

    __tablename__ = "student_event_participation"

    participation_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("students.student_id", ondelete="CASCADE"),
        nullable=False,
    )
    event_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("events.event_id", ondelete="CASCADE"),
        nullable=False,
    )
    college_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("colleges.college_id", ondelete="CASCADE"),
        nullable=False,
    )
    assigned_by_user_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    event_type: Mapped[EventType] = mapped_column(
        Enum(EventType, name="event_type"),
        nullable=False,
    )
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("student_id", "event_id", "event_type", name="uq_student_event_type"),
        Index("ix_sep_event_college_type", "event_id", "college_id", "event_type"),
        Index("ix_sep_student_id", "student_id"),
    )


class AccompanistEventParticipation(Base):
    """An accompanist assigned to an event."""

    __tablename__ = "accompanist_event_participation"

    participation_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    accompanist_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("accompanists.accompanist_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    event_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("events.event_id", ondelete="CASCADE"),
        nullable=False,
    )
    college_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("colleges.college_id", ondelete="CASCADE"),
        nullable=False,
    )
    assigned_by_user_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


def _per_event_table(event_code: str) -> Table:
    name = f"event_{event_code}"
    return Table(
        name,
        Base.metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column(
            "college_id",
            Integer,
            ForeignKey("colleges.college_id", ondelete="CASCADE"),
            nullable=False,
        ),
        Column("person_id", Integer, nullable=False),
        # Stored as PersonType values ("student" / "accompanist")
        Column("person_type", String(15), nullable=False),
        Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
        Index(f"ix_{name}_college_person", "college_id", "person_type", "person_id"),
    )


PER_EVENT_TABLES: dict[str, Table] = {code: _per_event_table(code) for code in FESTIVAL_EVENT_CODES}
