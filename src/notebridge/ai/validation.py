"""
Quality gate for model-generated patient documents.

Errors fail the document (and trigger the single retry); warnings are
passed through to the client for the clinician's attention.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

SECTION_KEYS: tuple[str, ...] = (
    "section_1_what_i_have",
    "section_2_how_to_live",
    "section_3_timeline",
    "section_4_life_impact",
    "section_5_medications",
    "section_6_warnings",
    "section_7_contacts",
)

MIN_SECTION_LENGTH = 50

UNCERTAINTY_PHRASES: tuple[str, ...] = (
    "i don't know",
    "i'm not sure",
    "unclear from notes",
    "consult doctor for diagnosis",
    "cannot determine",
    "information not available",
)

PLACEHOLDERS = frozenset({"n/a", "not applicable", "none"})

_MEDICATION_TERMS = re.compile(r"medication|medicine|drug|tablet|pill|mg|dose")
_NO_MEDICATION = re.compile(r"no medication|not prescribed|your doctor will provide")
_EMERGENCY_TERMS = re.compile(r"112|emergency|ambulance|immediate")
_CONTACT_TERMS = re.compile(r"phone|email|contact|appointment|clinic|hospital|doctor")
_CARE_TEAM = re.compile(r"your care team will provide")
_SUSPICIOUS_DOSAGES = (
    re.compile(r"\d{4,}\s*mg", re.IGNORECASE),
    re.compile(r"\d+\s*g(?!\s*\w)", re.IGNORECASE),
)
_NON_ASCII = re.compile(r"[^\x00-\x7F]")


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors


def _section(doc: Mapping[str, Any], key: str) -> str:
    value = doc.get(key)
    return value if isinstance(value, str) else ""


def validate_document(doc: Any, language: str = "english") -> ValidationResult:
    """Check a generated document against the content rules.

    *doc* is the parsed model output; anything other than a JSON object
    fails with a single error.
    """
    result = ValidationResult()
    if not isinstance(doc, Mapping):
        result.errors.append("Document is not a JSON object")
        return result

    for key in SECTION_KEYS:
        content = _section(doc, key).strip()
        if not content:
            result.errors.append(f"Missing section: {key}")
        elif len(content) < MIN_SECTION_LENGTH:
            result.errors.append(
                f"Section too short: {key} ({len(content)} chars, minimum {MIN_SECTION_LENGTH})"
            )

    medications = _section(doc, "section_5_medications").lower()
    if medications and not (
        _MEDICATION_TERMS.search(medications) or _NO_MEDICATION.search(medications)
    ):
        result.warnings.append("Medications section may be incomplete")

    if not _EMERGENCY_TERMS.search(_section(doc, "section_6_warnings").lower()):
        result.errors.append("Warning signs section must include emergency number 112")

    contacts = _section(doc, "section_7_contacts").lower()
    if not (_CONTACT_TERMS.search(contacts) or _CARE_TEAM.search(contacts)):
        result.warnings.append("Contacts section may be incomplete")

    all_content = " ".join(str(value) for value in doc.values()).lower()
    for phrase in UNCERTAINTY_PHRASES:
        if phrase in all_content:
            result.errors.append(f'Improper uncertainty language detected: "{phrase}"')

    for key, value in doc.items():
        if str(value).strip().lower() in PLACEHOLDERS:
            result.errors.append(f"Section {key} contains invalid placeholder content")

    for pattern in _SUSPICIOUS_DOSAGES:
        if pattern.search(medications):
            result.warnings.append("Potentially suspicious medication dosage detected")

    if language != "english" and not _NON_ASCII.search(all_content):
        result.errors.append(f"Language set to {language} but output appears to be in English")

    return result


def format_validation_errors(result: ValidationResult) -> str:
    """Numbered error and warning lists, fed back to the model on retry."""
    parts: list[str] = []
    if result.errors:
        parts.append("VALIDATION ERRORS:")
        parts.extend(f"{i}. {error}" for i, error in enumerate(result.errors, start=1))
    if result.warnings:
        if parts:
            parts.append("")
        parts.append("VALIDATION WARNINGS:")
        parts.extend(f"{i}. {warning}" for i, warning in enumerate(result.warnings, start=1))
    return "\n".join(parts) + ("\n" if parts else "")
