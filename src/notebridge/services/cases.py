"""Patient case service.

Every query filters on ``created_by``; a case owned by someone else raises
the same ``NotFoundError`` as a case that does not exist.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from notebridge.core.enums import CaseStatus
from notebridge.core.errors import InvalidInputError, NotFoundError
from notebridge.core.logging import get_logger
from notebridge.core.orm import (
    AiAnalysisTable,
    ApprovalTable,
    CaseFeedbackTable,
    PatientCaseTable,
    PatientProfileTable,
)
from notebridge.core.time import utc_now_naive

logger = get_logger(__name__)

CASE_NOT_FOUND = "Case not found"

# analysis moves these forward to pending_approval
_PRE_REVIEW = {CaseStatus.DRAFT.value, CaseStatus.PROCESSING.value}

_CASE_FIELDS = {"technical_note", "uploaded_file_names", "status"}
_PROFILE_FIELDS = {
    "age_bracket",
    "sex",
    "language",
    "health_literacy",
    "journey_type",
    "risk_appetite",
    "has_accessibility_needs",
    "include_relatives",
    "comorbidities",
}


class CaseService:
    """CRUD for patient cases and their child rows, scoped to one clinician."""

    def __init__(self, session: Session, user_id: str):
        self.session = session
        self.user_id = user_id

    def _owned(self, case_id: str, *, with_children: bool = False) -> PatientCaseTable:
        stmt = select(PatientCaseTable).where(
            PatientCaseTable.id == case_id,
            PatientCaseTable.created_by == self.user_id,
        )
        if with_children:
            stmt = stmt.options(
                selectinload(PatientCaseTable.patient_profiles),
                selectinload(PatientCaseTable.ai_analyses),
                selectinload(PatientCaseTable.approvals),
            )
        case = self.session.scalars(stmt).first()
        if case is None:
            raise NotFoundError(CASE_NOT_FOUND)
        return case

    def require_owned(self, case_id: str) -> PatientCaseTable:
        return self._owned(case_id)

    def create_case(
        self, technical_note: str, uploaded_file_names: list[str] | None = None
    ) -> PatientCaseTable:
        case = PatientCaseTable(
            created_by=self.user_id,
            technical_note=technical_note,
            uploaded_file_names=list(uploaded_file_names or []),
            status=CaseStatus.DRAFT.value,
        )
        self.session.add(case)
        self.session.flush()
        logger.info("case_created", case_id=case.id, user_id=self.user_id)
        return case

    def update_case(self, case_id: str, changes: Mapping[str, Any]) -> PatientCaseTable:
        """Apply a partial update; ``completed`` stamps ``completed_at``, other statuses clear it."""
        fields = {k: v for k, v in changes.items() if k in _CASE_FIELDS and v is not None}
        if not fields:
            raise InvalidInputError("At least one field must be provided")

        case = self._owned(case_id)
        if "technical_note" in fields:
            case.technical_note = fields["technical_note"]
        if "uploaded_file_names" in fields:
            case.uploaded_file_names = list(fields["uploaded_file_names"])
        if "status" in fields:
            status = CaseStatus(fields["status"])
            case.status = status.value
            case.completed_at = utc_now_naive() if status is CaseStatus.COMPLETED else None

        self.session.flush()
        logger.info("case_updated", case_id=case.id, fields=sorted(fields))
        return case

    def upsert_profile(self, case_id: str, data: Mapping[str, Any]) -> PatientProfileTable:
        """Create or replace the single patient profile of a case."""
        case = self._owned(case_id)
        values = {k: v for k, v in data.items() if k in _PROFILE_FIELDS}
        values["comorbidities"] = list(values.get("comorbidities") or [])

        profile = self.session.scalars(
            select(PatientProfileTable).where(PatientProfileTable.case_id == case.id)
        ).first()
        if profile is None:
            profile = PatientProfileTable(case_id=case.id, **values)
            self.session.add(profile)
        else:
            for key, value in values.items():
                setattr(profile, key, value)

        self.session.flush()
        logger.info("patient_profile_saved", case_id=case.id)
        return profile

    def add_analysis(
        self,
        case_id: str,
        *,
        ai_draft_text: str,
        analysis_data: Any = None,
        model_used: str | None = None,
    ) -> AiAnalysisTable:
        case = self._owned(case_id)
        analysis = AiAnalysisTable(
            case_id=case.id,
            analysis_data=analysis_data,
            ai_draft_text=ai_draft_text,
            model_used=model_used,
        )
        self.session.add(analysis)
        if case.status in _PRE_REVIEW:
            case.status = CaseStatus.PENDING_APPROVAL.value

        self.session.flush()
        logger.info("analysis_recorded", case_id=case.id, model=model_used, status=case.status)
        return analysis

    def add_approval(
        self, case_id: str, *, approved_text: str, notes: str | None = None
    ) -> ApprovalTable:
        """Record the human sign-off; the case becomes ``approved`` unless already completed."""
        case = self._owned(case_id)
        approval = ApprovalTable(
            case_id=case.id,
            approved_by=self.user_id,
            approved_text=approved_text,
            notes=notes,
        )
        self.session.add(approval)
        if case.status != CaseStatus.COMPLETED.value:
            case.status = CaseStatus.APPROVED.value

        self.session.flush()
        logger.info("case_approved", case_id=case.id, user_id=self.user_id)
        return approval

    def add_feedback(
        self,
        case_id: str,
        *,
        selected_options: list[str] | None = None,
        additional_comments: str | None = None,
    ) -> CaseFeedbackTable:
        case = self._owned(case_id)
        feedback = CaseFeedbackTable(
            case_id=case.id,
            submitted_by=self.user_id,
            selected_options=list(selected_options or []),
            additional_comments=additional_comments,
        )
        self.session.add(feedback)
        self.session.flush()
        logger.info("case_feedback_recorded", case_id=case.id, options=len(feedback.selected_options))
        return feedback

    def has_approval(self, case_id: str) -> bool:
        stmt = select(ApprovalTable.id).where(ApprovalTable.case_id == case_id).limit(1)
        return self.session.scalars(stmt).first() is not None

    def get_case(self, case_id: str) -> PatientCaseTable:
        return self._owned(case_id, with_children=True)

    def list_cases(self, limit: int = 10) -> list[PatientCaseTable]:
        """Newest-first history of the caller's cases."""
        if not 1 <= limit <= 100:
            raise InvalidInputError("limit must be between 1 and 100")
        stmt = (
            select(PatientCaseTable)
            .options(
                selectinload(PatientCaseTable.patient_profiles),
                selectinload(PatientCaseTable.ai_analyses),
                selectinload(PatientCaseTable.approvals),
            )
            .where(PatientCaseTable.created_by == self.user_id)
            .order_by(PatientCaseTable.created_at.desc())
            .limit(limit)
        )
        return list(self.session.scalars(stmt))
