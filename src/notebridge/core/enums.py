"""Enumerations shared by the ORM, services and API schemas."""

from enum import Enum


class UserRole(str, Enum):
    CLINICIAN = "CLINICIAN"
    ADMIN = "ADMIN"


class CaseStatus(str, Enum):
    """Lifecycle of a patient case.

    ``draft`` → ``processing`` → ``pending_approval`` → ``approved`` → ``completed``
    """

    DRAFT = "draft"
    PROCESSING = "processing"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    COMPLETED = "completed"
