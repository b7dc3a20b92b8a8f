"""Mapped tables: users and sessions, patient cases, published documents, account data.

Every clinician-owned row carries the owner's id (``created_by`` /
``user_id`` / ``approved_by``); services filter on it so one clinician can
never read or mutate another clinician's rows.
"""

from __future__ import annotations

import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notebridge.core.orm.base import NotebridgeBase, TimestampMixin, UUIDPrimaryKeyMixin
from notebridge.core.time import utc_now_naive

_USER_FK = "users.id"
_CASE_FK = "patient_cases.id"


# ── Identity ─────────────────────────────────────────────────────────────


class UserTable(UUIDPrimaryKeyMixin, TimestampMixin, NotebridgeBase):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="CLINICIAN")

    profile: Mapped[ProfileTable | None] = relationship(
        "ProfileTable", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    sessions: Mapped[list[SessionTable]] = relationship(
        "SessionTable", back_populates="user", cascade="all, delete-orphan"
    )


class ProfileTable(UUIDPrimaryKeyMixin, TimestampMixin, NotebridgeBase):
    __tablename__ = "profiles"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey(_USER_FK, ondelete="CASCADE"), unique=True, nullable=False
    )
    first_name: Mapped[str | None] = mapped_column(Text)
    last_name: Mapped[str | None] = mapped_column(Text)
    role: Mapped[str | None] = mapped_column(Text)
    language: Mapped[str] = mapped_column(Text, nullable=False, default="est")

    user: Mapped[UserTable] = relationship("UserTable", back_populates="profile")


class SessionTable(UUIDPrimaryKeyMixin, NotebridgeBase):
    __tablename__ = "sessions"
    __table_args__ = (
        Index("idx_sessions_user_id", "user_id"),
        Index("idx_sessions_expires_at", "expires_at"),
    )

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey(_USER_FK, ondelete="CASCADE"), nullable=False
    )
    refresh_token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    expires_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False)
    revoked_at: Mapped[datetime.datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now_naive
    )

    user: Mapped[UserTable] = relationship("UserTable", back_populates="sessions")


# ── Patient cases ────────────────────────────────────────────────────────


class PatientCaseTable(UUIDPrimaryKeyMixin, TimestampMixin, NotebridgeBase):
    __tablename__ = "patient_cases"
    __table_args__ = (Index("idx_patient_cases_created_by", "created_by"),)

    created_by: Mapped[str] = mapped_column(
        String(36), ForeignKey(_USER_FK, ondelete="CASCADE"), nullable=False
    )
    technical_note: Mapped[str | None] = mapped_column(Text)
    uploaded_file_names: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="draft")
    completed_at: Mapped[datetime.datetime | None] = mapped_column(DateTime)

    patient_profiles: Mapped[list[PatientProfileTable]] = relationship(
        "PatientProfileTable",
        cascade="all, delete-orphan",
        order_by="PatientProfileTable.created_at.desc()",
    )
    ai_analyses: Mapped[list[AiAnalysisTable]] = relationship(
        "AiAnalysisTable",
        cascade="all, delete-orphan",
        order_by="AiAnalysisTable.created_at.desc()",
    )
    approvals: Mapped[list[ApprovalTable]] = relationship(
        "ApprovalTable",
        cascade="all, delete-orphan",
        order_by="ApprovalTable.approved_at.desc()",
    )


class PatientProfileTable(UUIDPrimaryKeyMixin, NotebridgeBase):
    __tablename__ = "patient_profiles"

    case_id: Mapped[str] = mapped_column(
        String(36), ForeignKey(_CASE_FK, ondelete="CASCADE"), unique=True, nullable=False
    )
    age_bracket: Mapped[str | None] = mapped_column(Text)
    sex: Mapped[str | None] = mapped_column(Text)
    language: Mapped[str | None] = mapped_column(Text)
    health_literacy: Mapped[str | None] = mapped_column(Text)
    journey_type: Mapped[str | None] = mapped_column(Text)
    risk_appetite: Mapped[str | None] = mapped_column(Text)
    has_accessibility_needs: Mapped[bool | None] = mapped_column(Boolean)
    include_relatives: Mapped[bool | None] = mapped_column(Boolean)
    comorbidities: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now_naive
    )


class AiAnalysisTable(UUIDPrimaryKeyMixin, NotebridgeBase):
    __tablename__ = "ai_analyses"
    __table_args__ = (Index("idx_ai_analyses_case_id", "case_id"),)

    case_id: Mapped[str] = mapped_column(
        String(36), ForeignKey(_CASE_FK, ondelete="CASCADE"), nullable=False
    )
    analysis_data: Mapped[Any | None] = mapped_column(JSON)
    ai_draft_text: Mapped[str | None] = mapped_column(Text)
    model_used: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now_naive
    )


class ApprovalTable(UUIDPrimaryKeyMixin, NotebridgeBase):
    __tablename__ = "approvals"
    __table_args__ = (
        Index("idx_approvals_case_id", "case_id"),
        Index("idx_approvals_approved_by", "approved_by"),
    )

    case_id: Mapped[str] = mapped_column(
        String(36), ForeignKey(_CASE_FK, ondelete="CASCADE"), nullable=False
    )
    approved_by: Mapped[str] = mapped_column(
        String(36), ForeignKey(_USER_FK, ondelete="CASCADE"), nullable=False
    )
    approved_text: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    approved_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now_naive
    )


class CaseFeedbackTable(UUIDPrimaryKeyMixin, NotebridgeBase):
    __tablename__ = "case_feedback"
    __table_args__ = (
        Index("idx_case_feedback_case_id", "case_id"),
        Index("idx_case_feedback_submitted_by", "submitted_by"),
    )

    case_id: Mapped[str] = mapped_column(
        String(36), ForeignKey(_CASE_FK, ondelete="CASCADE"), nullable=False
    )
    submitted_by: Mapped[str] = mapped_column(
        String(36), ForeignKey(_USER_FK, ondelete="CASCADE"), nullable=False
    )
    selected_options: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    additional_comments: Mapped[str | None] = mapped_column(Text)
    submitted_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now_naive
    )


# ── Publishing ───────────────────────────────────────────────────────────


class PublishedDocumentTable(UUIDPrimaryKeyMixin, NotebridgeBase):
    __tablename__ = "published_documents"
    __table_args__ = (Index("idx_published_documents_case_id", "case_id"),)

    case_id: Mapped[str] = mapped_column(
        String(36), ForeignKey(_CASE_FK, ondelete="CASCADE"), nullable=False
    )
    created_by: Mapped[str] = mapped_column(
        String(36), ForeignKey(_USER_FK, ondelete="CASCADE"), nullable=False
    )
    access_token: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    sections_data: Mapped[Any] = mapped_column(JSON, nullable=False)
    patient_language: Mapped[str] = mapped_column(Text, nullable=False, default="est")
    clinician_name: Mapped[str] = mapped_column(Text, nullable=False)
    hospital_name: Mapped[str | None] = mapped_column(Text)
    published_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now_naive
    )
    expires_at: Mapped[datetime.datetime | None] = mapped_column(DateTime)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class PatientFeedbackTable(UUIDPrimaryKeyMixin, NotebridgeBase):
    __tablename__ = "patient_feedback"
    __table_args__ = (
        Index("idx_patient_feedback_case_id", "case_id"),
        Index("idx_patient_feedback_published_document_id", "published_document_id"),
    )

    case_id: Mapped[str] = mapped_column(
        String(36), ForeignKey(_CASE_FK, ondelete="CASCADE"), nullable=False
    )
    published_document_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("published_documents.id", ondelete="CASCADE"), nullable=False
    )
    feedback_source: Mapped[str] = mapped_column(Text, nullable=False, default="qr_view")
    selected_options: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    additional_comments: Mapped[str | None] = mapped_column(Text)
    submitted_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now_naive
    )


# ── Account ──────────────────────────────────────────────────────────────


class ClinicianContactTable(UUIDPrimaryKeyMixin, TimestampMixin, NotebridgeBase):
    __tablename__ = "clinician_contacts"
    __table_args__ = (
        Index("idx_clinician_contacts_user_id", "user_id"),
        Index("idx_clinician_contacts_is_primary", "is_primary"),
    )

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey(_USER_FK, ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    specialty: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(Text)
    email: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class UserDocumentTable(UUIDPrimaryKeyMixin, NotebridgeBase):
    __tablename__ = "user_documents"
    __table_args__ = (Index("idx_user_documents_user_id", "user_id"),)

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey(_USER_FK, ondelete="CASCADE"), nullable=False
    )
    file_name: Mapped[str] = mapped_column(Text, nullable=False)
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    file_type: Mapped[str] = mapped_column(Text, nullable=False)
    file_size: Mapped[int | None] = mapped_column(Integer)
    uploaded_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now_naive
    )


__all__ = [
    "UserTable",
    "ProfileTable",
    "SessionTable",
    "PatientCaseTable",
    "PatientProfileTable",
    "AiAnalysisTable",
    "ApprovalTable",
    "CaseFeedbackTable",
    "PublishedDocumentTable",
    "PatientFeedbackTable",
    "ClinicianContactTable",
    "UserDocumentTable",
]
