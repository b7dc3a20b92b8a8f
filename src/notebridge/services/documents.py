"""Published documents - the human-approval gate and public sharing.

A document can only be published for a case that carries at least one
clinician approval. Patients reach it through an unguessable access token
without authenticating; every successful view bumps ``view_count``.
"""

from __future__ import annotations

import secrets
import string
from datetime import datetime
from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from notebridge.core.errors import ConflictError, InvalidInputError, NotebridgeError, NotFoundError
from notebridge.core.logging import get_logger
from notebridge.core.orm import PatientFeedbackTable, PublishedDocumentTable
from notebridge.core.time import to_naive_utc, utc_now_naive
from notebridge.services.cases import CaseService

logger = get_logger(__name__)

ACCESS_TOKEN_ALPHABET = string.ascii_letters + string.digits
ACCESS_TOKEN_LENGTH = 12
MAX_TOKEN_ATTEMPTS = 5


def generate_access_token(length: int = ACCESS_TOKEN_LENGTH) -> str:
    return "".join(secrets.choice(ACCESS_TOKEN_ALPHABET) for _ in range(length))


class DocumentService:
    """Publishing operations for an authenticated clinician."""

    def __init__(self, session: Session, user_id: str):
        self.session = session
        self.user_id = user_id
        self.cases = CaseService(session, user_id)

    def _unused_token(self) -> str:
        for _ in range(MAX_TOKEN_ATTEMPTS):
            candidate = generate_access_token()
            taken = self.session.scalars(
                select(PublishedDocumentTable.id).where(
                    PublishedDocumentTable.access_token == candidate
                )
            ).first()
            if taken is None:
                return candidate
        raise NotebridgeError("Could not allocate a unique access token", code="TOKEN_EXHAUSTED")

    def publish(
        self,
        *,
        case_id: str,
        sections_data: Any,
        clinician_name: str,
        patient_language: str = "est",
        hospital_name: str | None = None,
        expires_at: datetime | None = None,
    ) -> PublishedDocumentTable:
        case = self.cases.require_owned(case_id)
        if not self.cases.has_approval(case.id):
            raise ConflictError("Case must be approved before publishing", code="NOT_APPROVED")

        document = PublishedDocumentTable(
            case_id=case.id,
            created_by=self.user_id,
            access_token=self._unused_token(),
            sections_data=sections_data,
            patient_language=patient_language or "est",
            clinician_name=clinician_name,
            hospital_name=hospital_name,
            expires_at=to_naive_utc(expires_at) if expires_at else None,
        )
        self.session.add(document)
        self.session.flush()
        logger.info("document_published", document_id=document.id, case_id=case.id)
        return document

    def latest_for_case(self, case_id: str) -> PublishedDocumentTable:
        stmt = (
            select(PublishedDocumentTable)
            .where(
                PublishedDocumentTable.case_id == case_id,
                PublishedDocumentTable.created_by == self.user_id,
                PublishedDocumentTable.is_active.is_(True),
            )
            .order_by(PublishedDocumentTable.published_at.desc())
            .limit(1)
        )
        document = self.session.scalars(stmt).first()
        if document is None:
            raise NotFoundError("No published document found")
        return document

    def deactivate(self, document_id: str) -> PublishedDocumentTable:
        stmt = select(PublishedDocumentTable).where(
            PublishedDocumentTable.id == document_id,
            PublishedDocumentTable.created_by == self.user_id,
        )
        document = self.session.scalars(stmt).first()
        if document is None:
            raise NotFoundError("Document not found")
        document.is_active = False
        self.session.flush()
        logger.info("document_deactivated", document_id=document.id)
        return document


class PublicDocumentService:
    """Unauthenticated access by token, plus patient feedback."""

    def __init__(self, session: Session):
        self.session = session

    def view(self, access_token: str) -> PublishedDocumentTable:
        """Return an active, unexpired document and count the view."""
        now = utc_now_naive()
        visible = (
            PublishedDocumentTable.access_token == access_token,
            PublishedDocumentTable.is_active.is_(True),
            or_(
                PublishedDocumentTable.expires_at.is_(None),
                PublishedDocumentTable.expires_at > now,
            ),
        )
        # single UPDATE so concurrent views never lose an increment
        result = self.session.execute(
            update(PublishedDocumentTable)
            .where(*visible)
            .values(view_count=PublishedDocumentTable.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:
            raise NotFoundError("Document not found or expired")

        document = self.session.scalars(
            select(PublishedDocumentTable)
            .where(PublishedDocumentTable.access_token == access_token)
            .execution_options(populate_existing=True)
        ).one()
        logger.info("document_viewed", document_id=document.id, views=document.view_count)
        return document

    def submit_feedback(
        self,
        *,
        case_id: str,
        published_document_id: str,
        feedback_source: str | None = None,
        selected_options: list[str] | None = None,
        additional_comments: str | None = None,
    ) -> PatientFeedbackTable:
        document = self.session.get(PublishedDocumentTable, published_document_id)
        if document is None:
            raise InvalidInputError("Published document not found")
        if document.case_id != case_id:
            raise InvalidInputError("Document and case mismatch")
        if not document.is_active:
            raise InvalidInputError("Document is inactive")
        if document.expires_at is not None and document.expires_at <= utc_now_naive():
            raise InvalidInputError("Document is expired")

        feedback = PatientFeedbackTable(
            case_id=case_id,
            published_document_id=document.id,
            feedback_source=feedback_source or "qr_view",
            selected_options=list(selected_options or []),
            additional_comments=additional_comments,
        )
        self.session.add(feedback)
        self.session.flush()
        logger.info("patient_feedback_recorded", document_id=document.id)
        return feedback
