"""
AI router: WatsonX-backed generation endpoints.

Endpoints:
    POST /ai/generate-patient-document-v2  full seven-section document
    POST /ai/regenerate-section            rewrite one section
    POST /ai/extract-text-from-document    OCR an uploaded image
"""

from __future__ import annotations

from fastapi import APIRouter

from notebridge.api.deps import CurrentUser, DocGenerator
from notebridge.api.schemas.payloads import (
    ExtractTextRequest,
    ExtractTextResponse,
    GenerateDocumentRequest,
    GenerateDocumentResponse,
    RegenerateSectionRequest,
    RegenerateSectionResponse,
    ValidationSummary,
)

router = APIRouter(prefix="/ai")


@router.post("/generate-patient-document-v2", response_model=GenerateDocumentResponse)
def generate_patient_document(
    body: GenerateDocumentRequest, _user: CurrentUser, generator: DocGenerator
) -> GenerateDocumentResponse:
    result = generator.generate(body.technical_note, body.patient_data)
    return GenerateDocumentResponse(
        document=result.document,
        model=result.model,
        validation=ValidationSummary(passed=True, warnings=result.warnings),
    )


@router.post("/regenerate-section", response_model=RegenerateSectionResponse)
def regenerate_section(
    body: RegenerateSectionRequest, _user: CurrentUser, generator: DocGenerator
) -> RegenerateSectionResponse:
    content = generator.regenerate_section(
        section_index=body.section_index,
        section_title=body.section_title,
        technical_note=body.technical_note,
        patient_data=body.patient_data,
        analysis=body.analysis,
        current_content=body.current_content,
    )
    return RegenerateSectionResponse(regenerated_content=content)


@router.post("/extract-text-from-document", response_model=ExtractTextResponse)
def extract_text(
    body: ExtractTextRequest, _user: CurrentUser, generator: DocGenerator
) -> ExtractTextResponse:
    return ExtractTextResponse(extracted_text=generator.extract_text(body.file_data))
