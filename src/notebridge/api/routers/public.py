"""Public router: patient access by token; no authentication."""

from __future__ import annotations

from fastapi import APIRouter, status

from notebridge.api.deps import DbSession
from notebridge.api.schemas.payloads import PatientFeedbackRequest
from notebridge.api.schemas.rows import PatientFeedbackOut, PublishedDocumentOut
from notebridge.services.documents import PublicDocumentService

router = APIRouter(prefix="/public")


@router.get("/documents/{token}", response_model=PublishedDocumentOut)
def view_document(token: str, db: DbSession) -> PublishedDocumentOut:
    """Fetch a shared document and count the view."""
    return PublishedDocumentOut.model_validate(PublicDocumentService(db).view(token))


@router.post(
    "/patient-feedback",
    response_model=PatientFeedbackOut,
    status_code=status.HTTP_201_CREATED,
)
def submit_patient_feedback(body: PatientFeedbackRequest, db: DbSession) -> PatientFeedbackOut:
    feedback = PublicDocumentService(db).submit_feedback(
        case_id=body.case_id,
        published_document_id=body.published_document_id,
        feedback_source=body.feedback_source,
        selected_options=body.selected_options,
        additional_comments=body.additional_comments,
    )
    return PatientFeedbackOut.model_validate(feedback)
