"""SQLAlchemy ORM layer: declarative base, tables and engine helpers."""

from notebridge.core.orm.base import NotebridgeBase, TimestampMixin, UUIDPrimaryKeyMixin, new_id
from notebridge.core.orm.session import NotebridgeSession, create_notebridge_engine, session_factory
from notebridge.core.orm.tables import (
    AiAnalysisTable,
    ApprovalTable,
    CaseFeedbackTable,
    ClinicianContactTable,
    PatientCaseTable,
    PatientFeedbackTable,
    PatientProfileTable,
    ProfileTable,
    PublishedDocumentTable,
    SessionTable,
    UserDocumentTable,
    UserTable,
)

__all__ = [
    "NotebridgeBase",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "new_id",
    "NotebridgeSession",
    "create_notebridge_engine",
    "session_factory",
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
