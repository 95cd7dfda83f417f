"""
User Models

College staff accounts. Accounts are created by the login service; this API
only reads them (team-manager presence on the dashboard).
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, func
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from fest_api.core.database import Base


class UserRole(str, Enum):
    """User roles in the system (canonical upper case)."""

    PRINCIPAL = "PRINCIPAL"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class User(Base):
    """A principal, team manager or festival administrator."""

    __tablename__ = "users"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # NULL for festival administrators
    college_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("colleges.college_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SAEnum(UserRole, name="user_role"),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<User(id={self.user_id}, email={self.email}, role={self.role.value})>"
