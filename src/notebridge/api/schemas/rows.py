"""Row serializers: ``snake_case`` views of ORM records."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, PlainSerializer, field_validator

from notebridge.core.time import format_iso

# stored naive UTC, rendered with an explicit offset
UtcDatetime = Annotated[datetime, PlainSerializer(format_iso, return_type=str)]


class RowModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class CaseOut(RowModel):
    id: str
    created_by: str
    technical_note: str | None
    uploaded_file_names: list[str]
    status: str
    completed_at: UtcDatetime | None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class PatientProfileOut(RowModel):
    id: str
    case_id: str
    age_bracket: str | None
    sex: str | None
    language: str | None
    health_literacy: str | None
    journey_type: str | None
    risk_appetite: str | None
    has_accessibility_needs: bool | None
    include_relatives: bool | None
    comorbidities: list[str]
    created_at: UtcDatetime


class AiAnalysisOut(RowModel):
    id: str
    case_id: str
    analysis_data: Any = None
    ai_draft_text: str | None
    model_used: str | None
    created_at: UtcDatetime


class ApprovalOut(RowModel):
    id: str
    case_id: str
    approved_by: str
    approved_text: str
    notes: str | None
    approved_at: UtcDatetime


class CaseDetailOut(CaseOut):
    patient_profiles: list[PatientProfileOut]
    ai_analyses: list[AiAnalysisOut]
    approvals: list[ApprovalOut]


class CaseFeedbackOut(RowModel):
    id: str
    case_id: str
    submitted_by: str
    selected_options: list[str]
    additional_comments: str | None
    submitted_at: UtcDatetime


class PublishedDocumentOut(RowModel):
    id: str
    case_id: str
    created_by: str
    access_token: str
    sections_data: Any
    patient_language: str
    clinician_name: str
    hospital_name: str | None
    published_at: UtcDatetime
    expires_at: UtcDatetime | None
    view_count: int
    is_active: bool


class PatientFeedbackOut(RowModel):
    id: str
    case_id: str
    published_document_id: str
    feedback_source: str
    selected_options: list[str]
    additional_comments: str | None
    submitted_at: UtcDatetime


class AccountProfileOut(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    language: str


class ContactOut(RowModel):
    id: str
    name: str
    specialty: str | None
    phone: str | None
    email: str | None
    notes: str | None
    is_primary: bool


class UserDocumentOut(RowModel):
    id: str
    file_name: str
    file_path: str
    file_type: str
    file_size: int
    uploaded_at: UtcDatetime

    @field_validator("file_size", mode="before")
    @classmethod
    def _size_default(cls, value: Any) -> Any:
        return 0 if value is None else value


class UserDocumentDownload(BaseModel):
    id: str
    file_name: str
    file_type: str
    file_data_base64: str
