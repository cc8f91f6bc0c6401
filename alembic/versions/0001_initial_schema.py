"""Initial schema: accounts, candidate profile sections, jobs and applications

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

# child tables after their parents; downgrade walks this in reverse
TABLES = (
    "users",
    "user_roles",
    "profiles",
    "employment_history",
    "address_history",
    "background_questions",
    "emergency_contacts",
    "documents",
    "authorizations",
    "jobs",
    "job_questions",
    "applications",
    "application_answers",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _owner() -> sa.Column:
    return sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "user_roles",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("role", sa.String(length=40), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )
    op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"])

    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
        ),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("ssn", sa.String(length=20), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("present_address_street", sa.String(length=255), nullable=True),
        sa.Column("present_address_city", sa.String(length=120), nullable=True),
        sa.Column("present_address_state", sa.String(length=40), nullable=True),
        sa.Column("present_address_zip", sa.String(length=20), nullable=True),
        sa.Column("cdl_number", sa.String(length=60), nullable=True),
        sa.Column("cdl_state", sa.String(length=40), nullable=True),
        sa.Column("cdl_expiration_date", sa.Date(), nullable=True),
        sa.Column("driving_experience_years", sa.Integer(), nullable=True),
        sa.Column("driving_experience_miles", sa.Integer(), nullable=True),
        sa.Column("driving_experience_equipment", sa.JSON(), nullable=True),
        sa.Column("profile_completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "employment_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("company_name", sa.String(length=255), nullable=False),
        sa.Column("company_address_street", sa.String(length=255), nullable=True),
        sa.Column("company_address_city", sa.String(length=120), nullable=True),
        sa.Column("company_address_state", sa.String(length=40), nullable=True),
        sa.Column("company_address_zip", sa.String(length=20), nullable=True),
        sa.Column("supervisor_name", sa.String(length=255), nullable=True),
        sa.Column("supervisor_phone", sa.String(length=50), nullable=True),
        sa.Column("supervisor_email", sa.String(length=255), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("reason_for_leaving", sa.Text(), nullable=True),
        sa.Column("cdl_required", sa.Boolean(), nullable=False),
        sa.Column("is_cdl_employment", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_employment_history_user_id", "employment_history", ["user_id"])

    op.create_table(
        "address_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("street", sa.String(length=255), nullable=False),
        sa.Column("city", sa.String(length=120), nullable=False),
        sa.Column("state", sa.String(length=40), nullable=False),
        sa.Column("zip", sa.String(length=20), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_address_history_user_id", "address_history", ["user_id"])

    op.create_table(
        "background_questions",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("question_number", sa.Integer(), nullable=False),
        sa.Column("answer", sa.Boolean(), nullable=False),
        sa.Column("explanation", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "question_number", name="uq_background_questions_user_number"),
    )
    op.create_index("ix_background_questions_user_id", "background_questions", ["user_id"])

    op.create_table(
        "emergency_contacts",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("address_street", sa.String(length=255), nullable=True),
        sa.Column("address_city", sa.String(length=120), nullable=False),
        sa.Column("address_state", sa.String(length=40), nullable=False),
        sa.Column("address_zip", sa.String(length=20), nullable=False),
        sa.Column("relationship", sa.String(length=120), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_emergency_contacts_user_id", "emergency_contacts", ["user_id"])

    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("document_type", sa.String(length=40), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_path", sa.String(length=600), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("mime_type", sa.String(length=120), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_documents_user_id", "documents", ["user_id"])

    op.create_table(
        "authorizations",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("authorization_type", sa.String(length=60), nullable=False),
        sa.Column("signed", sa.Boolean(), nullable=False),
        sa.Column("signed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "authorization_type", name="uq_authorizations_user_type"),
    )
    op.create_index("ix_authorizations_user_id", "authorizations", ["user_id"])

    op.create_table(
        "jobs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("requirements", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_jobs_created_by", "jobs", ["created_by"])

    op.create_table(
        "job_questions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("job_id", sa.Integer(), sa.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("question_type", sa.String(length=20), nullable=False),
        sa.Column("required", sa.Boolean(), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("options", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_job_questions_job_id", "job_questions", ["job_id"])

    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("job_id", sa.Integer(), sa.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("candidate_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(length=40), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("candidate_id", "job_id", name="uq_applications_candidate_job"),
    )
    op.create_index("ix_applications_job_id", "applications", ["job_id"])
    op.create_index("ix_applications_candidate_id", "applications", ["candidate_id"])

    op.create_table(
        "application_answers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "application_id",
            sa.Integer(),
            sa.ForeignKey("applications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "question_id", sa.Integer(), sa.ForeignKey("job_questions.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("answer", sa.Text(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("application_id", "question_id", name="uq_application_answers_app_question"),
    )
    op.create_index("ix_application_answers_application_id", "application_answers", ["application_id"])
    op.create_index("ix_application_answers_question_id", "application_answers", ["question_id"])


def downgrade() -> None:
    # dropping a table drops its indexes with it
    for table in reversed(TABLES):
        op.drop_table(table)
