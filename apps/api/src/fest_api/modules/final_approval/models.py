"""
Final Approval Models

The locked participant snapshot written once per college at final
approval. One row per person; rows are never updated afterwards.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from fest_api.core.database import Base
from fest_api.modules.events.models import PersonType


class FinalMasterRecord(Base):
    """A student or accompanist frozen into the final participant list."""

    __tablename__ = "final_event_participants_master"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    college_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("colleges.college_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    person_id: Mapped[int] = mapped_column(Integer, nullable=False)
    person_type: Mapped[PersonType] = mapped_column(
        Enum(PersonType, name="person_type"),
        nullable=False,
    )

    # Identity and contact
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    photo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Comma separated event names
    event_in_names: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    accompanist_in_names: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Student documents
    aadhaar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    college_id_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    sslc_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Accompanist details
    accompanist_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_team_manager: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    accompanist_id_proof_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("college_id", "person_type", "person_id", name="uq_final_master_person"),
    )

    def __repr__(self) -> str:
        return (
            f"<FinalMasterRecord(college={self.college_id}, "
            f"{self.person_type.value}={self.person_id})>"
        )
