"""Request bodies for cases, documents and account, plus the AI endpoint payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from notebridge.api.schemas.common import CamelRequest, CamelResponse
from notebridge.core.enums import CaseStatus

# ── Cases ────────────────────────────────────────────────────────────────


class CreateCaseRequest(CamelRequest):
    technical_note: str = Field(min_length=1)
    uploaded_file_names: list[str] = Field(default_factory=list)

    @field_validator("technical_note")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("technicalNote must not be blank")
        return value


class UpdateCaseRequest(CamelRequest):
    technical_note: str | None = None
    uploaded_file_names: list[str] | None = None
    status: CaseStatus | None = None

    @field_validator("technical_note", "uploaded_file_names", "status", mode="before")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        # omitted means unchanged; an explicit null is not a value
        if value is None:
            raise ValueError("must not be null")
        return value


class PatientProfileRequest(CamelRequest):
    age: str | None = None
    sex: str | None = None
    language: str | None = None
    health_literacy: str | None = None
    journey_type: str | None = None
    risk_appetite: str | None = None
    has_accessibility_needs: bool | None = None
    include_relatives: bool | None = None
    comorbidities: list[str] = Field(default_factory=list)

    @field_validator("age", mode="before")
    @classmethod
    def _age_as_text(cls, value: Any) -> Any:
        # the form sends a bracket ("60-69") or a plain number
        return str(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else value

    def to_profile_fields(self) -> dict[str, Any]:
        return {
            "age_bracket": self.age,
            "sex": self.sex,
            "language": self.language,
            "health_literacy": self.health_literacy,
            "journey_type": self.journey_type,
            "risk_appetite": self.risk_appetite,
            "has_accessibility_needs": self.has_accessibility_needs,
            "include_relatives": self.include_relatives,
            "comorbidities": self.comorbidities,
        }


class AnalysisRequest(CamelRequest):
    analysis_data: Any = None
    ai_draft_text: str
    model_used: str | None = None


class ApprovalRequest(CamelRequest):
    approved_text: str = Field(min_length=1)
    notes: str | None = None


class CaseFeedbackRequest(CamelRequest):
    selected_options: list[str] = Field(default_factory=list)
    additional_comments: str | None = None


# ── Documents ────────────────────────────────────────────────────────────


class PublishDocumentRequest(CamelRequest):
    case_id: str = Field(min_length=1)
    sections_data: Any
    patient_language: str = Field(default="est", min_length=1)
    clinician_name: str = Field(min_length=1)
    hospital_name: str | None = None
    expires_at: datetime | None = None


class PatientFeedbackRequest(CamelRequest):
    case_id: str = Field(min_length=1)
    published_document_id: str = Field(min_length=1)
    feedback_source: str | None = None
    selected_options: list[str] = Field(default_factory=list)
    additional_comments: str | None = None


# ── Account ──────────────────────────────────────────────────────────────


class ProfileUpdateRequest(CamelRequest):
    first_name: str = ""
    last_name: str = ""
    role: str = ""
    language: str = "est"


class ContactRequest(CamelRequest):
    name: str = Field(min_length=1)
    specialty: str | None = None
    phone: str | None = None
    email: str | None = None
    notes: str | None = None
    is_primary: bool = False


class ContactUpdateRequest(CamelRequest):
    name: str | None = Field(default=None, min_length=1)
    specialty: str | None = None
    phone: str | None = None
    email: str | None = None
    notes: str | None = None
    is_primary: bool | None = None


class UploadDocumentRequest(CamelRequest):
    file_name: str = Field(min_length=1)
    file_type: str = Field(min_length=1)
    file_data: str = Field(min_length=1)
    file_size: int | None = Field(default=None, ge=0)


# ── AI ───────────────────────────────────────────────────────────────────


class GenerateDocumentRequest(CamelRequest):
    technical_note: str = Field(min_length=1)
    patient_data: dict[str, Any] = Field(default_factory=dict)


class RegenerateSectionRequest(CamelRequest):
    section_index: int = Field(ge=0, le=6)
    section_title: str = Field(min_length=1)
    current_content: str | None = None
    analysis: dict[str, Any] | None = None
    patient_data: dict[str, Any] = Field(default_factory=dict)
    technical_note: str = Field(min_length=1)


class ExtractTextRequest(CamelRequest):
    file_data: str = Field(min_length=1)
    file_type: str | None = None


class ValidationSummary(CamelResponse):
    passed: bool
    warnings: list[str]


class GenerateDocumentResponse(CamelResponse):
    document: dict[str, Any]
    model: str
    validation: ValidationSummary


class RegenerateSectionResponse(CamelResponse):
    regenerated_content: str


class ExtractTextResponse(CamelResponse):
    extracted_text: str
