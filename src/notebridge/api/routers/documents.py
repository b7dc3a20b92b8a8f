"""
Documents router: publishing approved cases.

Endpoints:
    POST  /documents                          publish (case must be approved)
    GET   /documents/case/{case_id}           newest active document for a case
    PATCH /documents/{document_id}/deactivate revoke public access
"""

from __future__ import annotations

from fastapi import APIRouter, status

from notebridge.api.deps import CurrentUser, DbSession
from notebridge.api.schemas.payloads import PublishDocumentRequest
from notebridge.api.schemas.rows import PublishedDocumentOut
from notebridge.services.documents import DocumentService

router = APIRouter(prefix="/documents")


@router.post("", response_model=PublishedDocumentOut, status_code=status.HTTP_201_CREATED)
def publish_document(
    body: PublishDocumentRequest, user: CurrentUser, db: DbSession
) -> PublishedDocumentOut:
    document = DocumentService(db, user.user_id).publish(
        case_id=body.case_id,
        sections_data=body.sections_data,
        clinician_name=body.clinician_name,
        patient_language=body.patient_language,
        hospital_name=body.hospital_name,
        expires_at=body.expires_at,
    )
    return PublishedDocumentOut.model_validate(document)


@router.get("/case/{case_id}", response_model=PublishedDocumentOut)
def latest_document_for_case(case_id: str, user: CurrentUser, db: DbSession) -> PublishedDocumentOut:
    return PublishedDocumentOut.model_validate(
        DocumentService(db, user.user_id).latest_for_case(case_id)
    )


@router.patch("/{document_id}/deactivate", response_model=PublishedDocumentOut)
def deactivate_document(document_id: str, user: CurrentUser, db: DbSession) -> PublishedDocumentOut:
    return PublishedDocumentOut.model_validate(
        DocumentService(db, user.user_id).deactivate(document_id)
    )
