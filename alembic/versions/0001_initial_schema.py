"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _fk(name: str, target: str, **kwargs) -> sa.Column:
    return sa.Column(name, sa.String(36), sa.ForeignKey(target, ondelete="CASCADE"), nullable=False, **kwargs)


def _stamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.Text(), nullable=False, unique=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("role", sa.String(16), nullable=False),
        _stamp("created_at"),
        _stamp("updated_at"),
    )
    op.create_table(
        "profiles",
        _id(),
        _fk("user_id", "users.id", unique=True),
        sa.Column("first_name", sa.Text()),
        sa.Column("last_name", sa.Text()),
        sa.Column("role", sa.Text()),
        sa.Column("language", sa.Text(), nullable=False),
        _stamp("created_at"),
        _stamp("updated_at"),
    )
    op.create_table(
        "sessions",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("refresh_token_hash", sa.String(64), nullable=False, unique=True),
        _stamp("expires_at"),
        _stamp("revoked_at", nullable=True),
        _stamp("created_at"),
    )
    op.create_index("idx_sessions_user_id", "sessions", ["user_id"])
    op.create_index("idx_sessions_expires_at", "sessions", ["expires_at"])

    op.create_table(
        "patient_cases",
        _id(),
        _fk("created_by", "users.id"),
        sa.Column("technical_note", sa.Text()),
        sa.Column("uploaded_file_names", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        _stamp("completed_at", nullable=True),
        _stamp("created_at"),
        _stamp("updated_at"),
    )
    op.create_index("idx_patient_cases_created_by", "patient_cases", ["created_by"])

    op.create_table(
        "patient_profiles",
        _id(),
        _fk("case_id", "patient_cases.id", unique=True),
        sa.Column("age_bracket", sa.Text()),
        sa.Column("sex", sa.Text()),
        sa.Column("language", sa.Text()),
        sa.Column("health_literacy", sa.Text()),
        sa.Column("journey_type", sa.Text()),
        sa.Column("risk_appetite", sa.Text()),
        sa.Column("has_accessibility_needs", sa.Boolean()),
        sa.Column("include_relatives", sa.Boolean()),
        sa.Column("comorbidities", sa.JSON(), nullable=False),
        _stamp("created_at"),
    )
    op.create_table(
        "ai_analyses",
        _id(),
        _fk("case_id", "patient_cases.id"),
        sa.Column("analysis_data", sa.JSON()),
        sa.Column("ai_draft_text", sa.Text()),
        sa.Column("model_used", sa.Text()),
        _stamp("created_at"),
    )
    op.create_index("idx_ai_analyses_case_id", "ai_analyses", ["case_id"])

    op.create_table(
        "approvals",
        _id(),
        _fk("case_id", "patient_cases.id"),
        _fk("approved_by", "users.id"),
        sa.Column("approved_text", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text()),
        _stamp("approved_at"),
    )
    op.create_index("idx_approvals_case_id", "approvals", ["case_id"])
    op.create_index("idx_approvals_approved_by", "approvals", ["approved_by"])

    op.create_table(
        "case_feedback",
        _id(),
        _fk("case_id", "patient_cases.id"),
        _fk("submitted_by", "users.id"),
        sa.Column("selected_options", sa.JSON(), nullable=False),
        sa.Column("additional_comments", sa.Text()),
        _stamp("submitted_at"),
    )
    op.create_index("idx_case_feedback_case_id", "case_feedback", ["case_id"])
    op.create_index("idx_case_feedback_submitted_by", "case_feedback", ["submitted_by"])

    op.create_table(
        "published_documents",
        _id(),
        _fk("case_id", "patient_cases.id"),
        _fk("created_by", "users.id"),
        sa.Column("access_token", sa.String(32), nullable=False, unique=True),
        sa.Column("sections_data", sa.JSON(), nullable=False),
        sa.Column("patient_language", sa.Text(), nullable=False),
        sa.Column("clinician_name", sa.Text(), nullable=False),
        sa.Column("hospital_name", sa.Text()),
        _stamp("published_at"),
        _stamp("expires_at", nullable=True),
        sa.Column("view_count", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    )
    op.create_index("idx_published_documents_case_id", "published_documents", ["case_id"])

    op.create_table(
        "patient_feedback",
        _id(),
        _fk("case_id", "patient_cases.id"),
        _fk("published_document_id", "published_documents.id"),
        sa.Column("feedback_source", sa.Text(), nullable=False),
        sa.Column("selected_options", sa.JSON(), nullable=False),
        sa.Column("additional_comments", sa.Text()),
        _stamp("submitted_at"),
    )
    op.create_index("idx_patient_feedback_case_id", "patient_feedback", ["case_id"])
    op.create_index(
        "idx_patient_feedback_published_document_id", "patient_feedback", ["published_document_id"]
    )

    op.create_table(
        "clinician_contacts",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("specialty", sa.Text()),
        sa.Column("phone", sa.Text()),
        sa.Column("email", sa.Text()),
        sa.Column("notes", sa.Text()),
        sa.Column("is_primary", sa.Boolean(), nullable=False),
        _stamp("created_at"),
        _stamp("updated_at"),
    )
    op.create_index("idx_clinician_contacts_user_id", "clinician_contacts", ["user_id"])
    op.create_index("idx_clinician_contacts_is_primary", "clinician_contacts", ["is_primary"])

    op.create_table(
        "user_documents",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("file_name", sa.Text(), nullable=False),
        sa.Column("file_path", sa.Text(), nullable=False),
        sa.Column("file_type", sa.Text(), nullable=False),
        sa.Column("file_size", sa.Integer()),
        _stamp("uploaded_at"),
    )
    op.create_index("idx_user_documents_user_id", "user_documents", ["user_id"])


def downgrade() -> None:
    for table in (
        "user_documents",
        "clinician_contacts",
        "patient_feedback",
        "published_documents",
        "case_feedback",
        "approvals",
        "ai_analyses",
        "patient_profiles",
        "patient_cases",
        "sessions",
        "profiles",
        "users",
    ):
        op.drop_table(table)
