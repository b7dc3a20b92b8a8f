"""
Cases router: patient cases and their profile, analyses, approvals, feedback.

All endpoints require a bearer token and only ever touch the caller's cases.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from notebridge.api.deps import CurrentUser, DbSession
from notebridge.api.schemas.payloads import (
    AnalysisRequest,
    ApprovalRequest,
    CaseFeedbackRequest,
    CreateCaseRequest,
    PatientProfileRequest,
    UpdateCaseRequest,
)
from notebridge.api.schemas.rows import (
    AiAnalysisOut,
    ApprovalOut,
    CaseDetailOut,
    CaseFeedbackOut,
    CaseOut,
    PatientProfileOut,
)
from notebridge.services.cases import CaseService

router = APIRouter(prefix="/cases")


@router.post("", response_model=CaseOut, status_code=status.HTTP_201_CREATED)
def create_case(body: CreateCaseRequest, user: CurrentUser, db: DbSession) -> CaseOut:
    case = CaseService(db, user.user_id).create_case(body.technical_note, body.uploaded_file_names)
    return CaseOut.model_validate(case)


@router.get("", response_model=list[CaseOut])
def list_cases(
    user: CurrentUser,
    db: DbSession,
    limit: int = Query(10, ge=1, le=100, description="Number of cases (max 100)"),
) -> list[CaseOut]:
    """Newest-first case history."""
    return [CaseOut.model_validate(c) for c in CaseService(db, user.user_id).list_cases(limit)]


@router.get("/{case_id}", response_model=CaseDetailOut)
def get_case(case_id: str, user: CurrentUser, db: DbSession) -> CaseDetailOut:
    return CaseDetailOut.model_validate(CaseService(db, user.user_id).get_case(case_id))


@router.patch("/{case_id}", response_model=CaseOut)
def update_case(case_id: str, body: UpdateCaseRequest, user: CurrentUser, db: DbSession) -> CaseOut:
    changes = body.model_dump(exclude_unset=True)
    case = CaseService(db, user.user_id).update_case(case_id, changes)
    return CaseOut.model_validate(case)


@router.post("/{case_id}/profile", response_model=PatientProfileOut)
def save_patient_profile(
    case_id: str, body: PatientProfileRequest, user: CurrentUser, db: DbSession
) -> PatientProfileOut:
    profile = CaseService(db, user.user_id).upsert_profile(case_id, body.to_profile_fields())
    return PatientProfileOut.model_validate(profile)


@router.post("/{case_id}/analysis", response_model=AiAnalysisOut)
def save_analysis(case_id: str, body: AnalysisRequest, user: CurrentUser, db: DbSession) -> AiAnalysisOut:
    analysis = CaseService(db, user.user_id).add_analysis(
        case_id,
        ai_draft_text=body.ai_draft_text,
        analysis_data=body.analysis_data,
        model_used=body.model_used,
    )
    return AiAnalysisOut.model_validate(analysis)


@router.post("/{case_id}/approval", response_model=ApprovalOut)
def save_approval(case_id: str, body: ApprovalRequest, user: CurrentUser, db: DbSession) -> ApprovalOut:
    approval = CaseService(db, user.user_id).add_approval(
        case_id, approved_text=body.approved_text, notes=body.notes
    )
    return ApprovalOut.model_validate(approval)


@router.post("/{case_id}/feedback", response_model=CaseFeedbackOut, status_code=status.HTTP_201_CREATED)
def save_feedback(
    case_id: str, body: CaseFeedbackRequest, user: CurrentUser, db: DbSession
) -> CaseFeedbackOut:
    feedback = CaseService(db, user.user_id).add_feedback(
        case_id,
        selected_options=body.selected_options,
        additional_comments=body.additional_comments,
    )
    return CaseFeedbackOut.model_validate(feedback)
