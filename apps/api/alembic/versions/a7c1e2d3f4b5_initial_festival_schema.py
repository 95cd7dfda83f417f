"""initial festival registration schema

Revision ID: a7c1e2d3f4b5
Revises:
Create Date: 2026-10-19 09:00:00.000000

This migration:
1. Creates colleges, users and the college side tables (accommodation, payment)
2. Creates students, applications and documents
3. Creates events, the assignment tables and one participant table per event
4. Creates the final participant snapshot table

The per-event tables share one layout. The codes are listed here rather
than imported so later additions to the application do not rewrite history;
add a new migration for each new event table.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a7c1e2d3f4b5"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

EVENT_CODES = (
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


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def _college_fk(**kwargs) -> sa.Column:
    return sa.Column(
        "college_id",
        sa.Integer(),
        sa.ForeignKey("colleges.college_id", ondelete="CASCADE"),
        nullable=False,
        **kwargs,
    )


def upgrade() -> None:
    """Create every table of the festival registration schema."""
    # Colleges
    op.create_table(
        "colleges",
        sa.Column("college_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("college_code", sa.String(length=20), nullable=False, unique=True),
        sa.Column("college_name", sa.String(length=255), nullable=False),
        sa.Column("place", sa.String(length=100), nullable=True),
        sa.Column("max_quota", sa.Integer(), nullable=False, server_default="45"),
        sa.Column("is_final_approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("final_approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("final_approved_by", sa.Integer(), nullable=True),
        _created_at(),
    )

    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "college_id",
            sa.Integer(),
            sa.ForeignKey("colleges.college_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column(
            "role",
            sa.Enum("PRINCIPAL", "MANAGER", "ADMIN", name="user_role"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_college_id", "users", ["college_id"])

    op.create_table(
        "accommodation_requests",
        sa.Column("request_id", sa.Integer(), primary_key=True, autoincrement=True),
        _college_fk(unique=True),
        sa.Column("total_boys", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_girls", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=20), nullable=True),
        _created_at("applied_at"),
    )

    op.create_table(
        "payment_receipts",
        sa.Column("receipt_id", sa.Integer(), primary_key=True, autoincrement=True),
        _college_fk(unique=True),
        sa.Column("receipt_url", sa.String(length=500), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("admin_remarks", sa.Text(), nullable=True),
        _created_at("uploaded_at"),
    )

    # Students and applications
    op.create_table(
        "students",
        sa.Column("student_id", sa.Integer(), primary_key=True, autoincrement=True),
        _college_fk(),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("usn", sa.String(length=20), nullable=False, unique=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("gender", sa.String(length=10), nullable=True),
        sa.Column("passport_photo_url", sa.String(length=500), nullable=True),
        sa.Column("reapply_count", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
    )
    op.create_index("ix_students_college_id", "students", ["college_id"])

    op.create_table(
        "student_applications",
        sa.Column("application_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "student_id",
            sa.Integer(),
            sa.ForeignKey("students.student_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("blood_group", sa.String(length=5), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("department", sa.String(length=100), nullable=True),
        sa.Column("year_of_study", sa.Integer(), nullable=True),
        sa.Column("semester", sa.Integer(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("SUBMITTED", "APPROVED", "REJECTED", name="application_status"),
            nullable=False,
            server_default="SUBMITTED",
        ),
        _created_at("submitted_at"),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_reason", sa.Text(), nullable=True),
    )
    op.create_index(
        "ix_student_applications_student_id", "student_applications", ["student_id"]
    )
    op.create_index(
        "ix_student_applications_status_submitted",
        "student_applications",
        ["status", "submitted_at"],
    )

    op.create_table(
        "application_documents",
        sa.Column("document_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "application_id",
            sa.Integer(),
            sa.ForeignKey("student_applications.application_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("document_type", sa.String(length=50), nullable=False),
        sa.Column("document_url", sa.String(length=500), nullable=False),
        _created_at("uploaded_at"),
    )
    op.create_index(
        "ix_application_documents_application_id", "application_documents", ["application_id"]
    )

    # Accompanists
    op.create_table(
        "accompanists",
        sa.Column("accompanist_id", sa.Integer(), primary_key=True, autoincrement=True),
        _college_fk(),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("passport_photo_url", sa.String(length=500), nullable=True),
        sa.Column("id_proof_url", sa.String(length=500), nullable=True),
        sa.Column(
            "accompanist_type",
            sa.Enum("FACULTY", "PROFESSIONAL", name="accompanist_type"),
            nullable=False,
            server_default="FACULTY",
        ),
        sa.Column("is_team_manager", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
    )
    op.create_index("ix_accompanists_college_id", "accompanists", ["college_id"])

    # Events and assignments
    op.create_table(
        "events",
        sa.Column("event_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_code", sa.String(length=50), nullable=False, unique=True),
        sa.Column("event_name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=True),
        sa.Column("max_participants_per_college", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("max_accompanists_per_college", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "student_event_participation",
        sa.Column("participation_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "student_id",
            sa.Integer(),
            sa.ForeignKey("students.student_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "event_id",
            sa.Integer(),
            sa.ForeignKey("events.event_id", ondelete="CASCADE"),
            nullable=False,
        ),
        _college_fk(),
        sa.Column("assigned_by_user_id", sa.Integer(), nullable=True),
        sa.Column(
            "event_type",
            sa.Enum("PARTICIPATING", "ACCOMPANYING", name="event_type"),
            nullable=False,
        ),
        _created_at("assigned_at"),
        sa.UniqueConstraint("student_id", "event_id", "event_type", name="uq_student_event_type"),
    )
    op.create_index(
        "ix_sep_event_college_type",
        "student_event_participation",
        ["event_id", "college_id", "event_type"],
    )
    op.create_index("ix_sep_student_id", "student_event_participation", ["student_id"])

    op.create_table(
        "accompanist_event_participation",
        sa.Column("participation_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "accompanist_id",
            sa.Integer(),
            sa.ForeignKey("accompanists.accompanist_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "event_id",
            sa.Integer(),
            sa.ForeignKey("events.event_id", ondelete="CASCADE"),
            nullable=False,
        ),
        _college_fk(),
        sa.Column("assigned_by_user_id", sa.Integer(), nullable=True),
        _created_at("assigned_at"),
    )
    op.create_index(
        "ix_accompanist_event_participation_accompanist_id",
        "accompanist_event_participation",
        ["accompanist_id"],
    )

    for code in EVENT_CODES:
        table_name = f"event_{code}"
        op.create_table(
            table_name,
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            _college_fk(),
            sa.Column("person_id", sa.Integer(), nullable=False),
            sa.Column("person_type", sa.String(length=15), nullable=False),
            _created_at(),
        )
        op.create_index(
            f"ix_{table_name}_college_person",
            table_name,
            ["college_id", "person_type", "person_id"],
        )

    # Final snapshot
    op.create_table(
        "final_event_participants_master",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _college_fk(),
        sa.Column("person_id", sa.Integer(), nullable=False),
        sa.Column(
            "person_type",
            sa.Enum("STUDENT", "ACCOMPANIST", name="person_type"),
            nullable=False,
        ),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("photo_url", sa.String(length=500), nullable=True),
        sa.Column("event_in_names", sa.String(length=1000), nullable=True),
        sa.Column("accompanist_in_names", sa.String(length=1000), nullable=True),
        sa.Column("aadhaar_url", sa.String(length=500), nullable=True),
        sa.Column("college_id_url", sa.String(length=500), nullable=True),
        sa.Column("sslc_url", sa.String(length=500), nullable=True),
        sa.Column("accompanist_type", sa.String(length=20), nullable=True),
        sa.Column("is_team_manager", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("accompanist_id_proof_url", sa.String(length=500), nullable=True),
        _created_at(),
        sa.UniqueConstraint(
            "college_id", "person_type", "person_id", name="uq_final_master_person"
        ),
    )
    op.create_index(
        "ix_final_event_participants_master_college_id",
        "final_event_participants_master",
        ["college_id"],
    )


def downgrade() -> None:
    """Drop every table and enum type."""
    op.drop_table("final_event_participants_master")
    for code in reversed(EVENT_CODES):
        op.drop_table(f"event_{code}")
    op.drop_table("accompanist_event_participation")
    op.drop_table("student_event_participation")
    op.drop_table("events")
    op.drop_table("accompanists")
    op.drop_table("application_documents")
    op.drop_table("student_applications")
    op.drop_table("students")
    op.drop_table("payment_receipts")
    op.drop_table("accommodation_requests")
    op.drop_table("users")
    op.drop_table("colleges")

    for enum_name in (
        "person_type",
        "event_type",
        "accompanist_type",
        "application_status",
        "user_role",
    ):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
