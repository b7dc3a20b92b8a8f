"""
Patient-document generation on top of the WatsonX client.

``generate`` makes up to ``MAX_RETRIES + 1`` attempts. A failed attempt
(validation errors, unparsable output or an upstream error) feeds its
failure text into the next prompt; after the last attempt the failure is
raised as the matching ``NotebridgeError``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from notebridge.ai import prompts
from notebridge.ai.validation import format_validation_errors, validate_document
from notebridge.ai.watsonx import ChatOptions, WatsonxClient
from notebridge.core.errors import (
    ConfigError,
    GenerationError,
    InvalidInputError,
    NotebridgeError,
)
from notebridge.core.logging import get_logger

logger = get_logger(__name__)

MAX_TECHNICAL_NOTE_LENGTH = 50_000
MAX_RETRIES = 1

GENERATION_OPTIONS = ChatOptions(temperature=0.4, max_tokens=6000)
SECTION_OPTIONS = ChatOptions(temperature=0.4, max_tokens=1000)
OCR_OPTIONS = ChatOptions(temperature=0.3, max_tokens=4000)

_FENCE = re.compile(r"^```(?:json)?\n?(?P<body>.*?)\n?```$", re.DOTALL)


class ModelOutputError(NotebridgeError):
    """The model answered, but not with a usable JSON document."""

    default_code = "INVALID_MODEL_OUTPUT"


def parse_model_json(content: str) -> Any:
    """Parse model output as JSON, tolerating a surrounding Markdown code fence."""
    cleaned = content.strip()
    match = _FENCE.match(cleaned)
    if match:
        cleaned = match.group("body")
    try:
        return json.loads(cleaned.strip())
    except json.JSONDecodeError as exc:
        raise ModelOutputError(f"Model output is not valid JSON: {exc.msg}", cause=exc) from exc


@dataclass
class GeneratedDocument:
    document: dict[str, Any]
    model: str
    warnings: list[str] = field(default_factory=list)
    attempts: int = 1


class DocumentGenerator:
    """Turns technical notes into validated patient documents."""

    def __init__(self, client: WatsonxClient, *, model_id: str, vision_model_id: str):
        self.client = client
        self.model_id = model_id
        self.vision_model_id = vision_model_id

    def generate(self, technical_note: str, patient_data: Mapping[str, Any] | None) -> GeneratedDocument:
        if len(technical_note) > MAX_TECHNICAL_NOTE_LENGTH:
            raise InvalidInputError(
                f"Technical note is too long ({len(technical_note)}). "
                f"Maximum is {MAX_TECHNICAL_NOTE_LENGTH}."
            )

        ctx = prompts.PatientContext.from_patient_data(patient_data)
        base_prompt = prompts.build_generation_prompt(technical_note, ctx)
        last_failure = ""

        for attempt in range(1, MAX_RETRIES + 2):
            is_last = attempt > MAX_RETRIES
            prompt = prompts.build_retry_prompt(base_prompt, last_failure) if last_failure else base_prompt
            try:
                content = self.client.chat(
                    [{"role": "user", "content": prompt}],
                    model_id=self.model_id,
                    options=GENERATION_OPTIONS,
                )
                if not content.strip():
                    raise ModelOutputError("No content received from AI")
                document = parse_model_json(content)
            except ConfigError:
                raise
            except NotebridgeError as exc:
                logger.warning("generation_attempt_failed", attempt=attempt, error=exc.message)
                if is_last:
                    raise
                last_failure = exc.message
                continue

            validation = validate_document(document, ctx.language)
            if validation.passed:
                logger.info(
                    "document_generated",
                    attempt=attempt,
                    model=self.model_id,
                    warnings=len(validation.warnings),
                )
                return GeneratedDocument(
                    document=dict(document),
                    model=self.model_id,
                    warnings=validation.warnings,
                    attempts=attempt,
                )

            logger.warning(
                "generation_validation_failed",
                attempt=attempt,
                errors=len(validation.errors),
                warnings=len(validation.warnings),
            )
            if is_last:
                raise GenerationError(
                    "AI generation incomplete after retries. Please regenerate.",
                    validation_errors=validation.errors,
                    validation_warnings=validation.warnings,
                )
            last_failure = format_validation_errors(validation)

        # loop always returns or raises
        raise NotebridgeError("Unexpected generation flow exit")

    def regenerate_section(
        self,
        *,
        section_index: int,
        section_title: str,
        technical_note: str,
        patient_data: Mapping[str, Any] | None,
        analysis: Mapping[str, Any] | None = None,
        current_content: str | None = None,
    ) -> str:
        ctx = prompts.PatientContext.from_patient_data(
            patient_data, default_age=prompts.DEFAULT_SECTION_AGE
        )
        try:
            prompt = prompts.build_section_prompt(
                section_index=section_index,
                section_title=section_title,
                technical_note=technical_note,
                ctx=ctx,
                analysis=analysis,
                current_content=current_content,
            )
        except ValueError as exc:
            raise InvalidInputError(str(exc), cause=exc) from exc

        content = self.client.chat(
            [{"role": "user", "content": prompt}],
            model_id=self.model_id,
            options=SECTION_OPTIONS,
        ).strip()
        if not content:
            raise ModelOutputError("No content received from AI")
        logger.info("section_regenerated", section_index=section_index, chars=len(content))
        return content

    def extract_text(self, file_data: str) -> str:
        """OCR an image (data URI) with the vision model."""
        content = self.client.chat(
            prompts.build_ocr_messages(file_data),
            model_id=self.vision_model_id,
            options=OCR_OPTIONS,
        )
        if not content.strip():
            raise InvalidInputError("No text could be extracted from the document")
        logger.info("text_extracted", chars=len(content))
        return content
