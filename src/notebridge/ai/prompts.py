"""
Prompt construction for patient-document generation.

A prompt is assembled from independent blocks so each concern can be
tested on its own:

* ``SYSTEM_PROMPT``                     role and core principles
* ``personalization_instructions(ctx)`` literacy tier, age band, journey, depth
* ``section_guidelines(language)``      the seven document sections
* ``language_guidelines(language)``     register for the output language
* ``SAFETY_RULES``                      non-negotiable content rules
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from notebridge.ai.validation import SECTION_KEYS

Sex = Literal["male", "female", "other"]
Literacy = Literal["low", "medium", "high"]
Language = Literal["estonian", "russian", "english"]
JourneyType = Literal["elective", "emergency", "chronic", "first-time"]
RiskAppetite = Literal["minimal", "moderate", "detailed"]

DEFAULT_GENERATION_AGE = 65
DEFAULT_SECTION_AGE = 50

SECTION_TITLES: tuple[str, ...] = (
    "WHAT DO I HAVE",
    "HOW SHOULD I LIVE NEXT",
    "HOW THE NEXT 6 MONTHS OF MY LIFE WILL LOOK LIKE",
    "WHAT DOES IT MEAN FOR MY LIFE",
    "MY MEDICATIONS",
    "WARNING SIGNS",
    "MY CONTACTS",
)

SECTION_PURPOSES: tuple[str, ...] = (
    "the diagnosis and what it means, in plain words",
    "concrete day-to-day instructions",
    "what to expect over the coming months, phase by phase",
    "how the condition affects work, family and daily life in the long run",
    "each medicine, what it is for and how to take it safely",
    "symptoms that need urgent help, including the emergency number 112",
    "who to contact and when the follow-up visits are",
)

# per-section focus used when a single section is rewritten
SECTION_FOCUS: tuple[str, ...] = (
    "Explain the diagnosis in plain language and mention the relevant test results.",
    "Give practical daily instructions covering diet, physical activity and self-monitoring.",
    "Split the coming months into phases and describe the improvement expected in each.",
    "Describe the long-term effect on everyday life honestly but with a hopeful tone.",
    "List every medication with its name, dose, timing, purpose and why it matters.",
    "List the symptoms that require immediate action and tell the patient to call 112.",
    "Give the contacts to use, the follow-up appointments and the emergency number.",
)

SYSTEM_PROMPT = """\
You write for patients. Your job is to turn a clinician's technical note into \
an explanation the patient can read at home, understand and act on.

Work only from the material you are given. Do not invent diagnoses, doses or \
dates. When the note does not say something, tell the patient plainly that it \
is not yet known instead of guessing.

Principles:
1. Plain words first; when a medical term is needed, explain it right away.
2. Be warm and direct without talking down to the reader.
3. Fit vocabulary, sentence length and depth to the patient profile.
4. Give medications, warning signs and contacts the most care.
5. Prefer short bullet points inside every section.

The document always has exactly seven sections."""

SAFETY_RULES = """\
SAFETY RULES:
1. No speculation about diagnosis, prognosis or treatment.
2. The warning-signs section must always tell the patient when to call 112.
3. Medication names and doses are copied from the note, never adjusted.
4. Nothing may appear that is not supported by the note.
5. Respect the patient's culture and language.
6. Every one of the seven sections must contain real content."""

_LITERACY_BLOCKS: dict[str, str] = {
    "low": (
        "HEALTH LITERACY - LOW:\n"
        "- Everyday words only, roughly a primary-school reading level\n"
        "- Sentences of no more than 10 to 15 words\n"
        "- Replace medical terms with familiar comparisons"
    ),
    "medium": (
        "HEALTH LITERACY - MEDIUM:\n"
        "- Clear, plain language\n"
        "- A medical term may appear if it is explained in the same sentence\n"
        "- Sentences of about 15 to 20 words"
    ),
    "high": (
        "HEALTH LITERACY - HIGH:\n"
        "- Accessible but precise language\n"
        "- Medical terminology is fine when given context\n"
        "- Longer, more detailed explanations are welcome"
    ),
}

_JOURNEY_LINES: dict[str, str] = {
    "emergency": "JOURNEY - EMERGENCY: acknowledge how sudden this was and reassure the patient.",
    "first-time": "JOURNEY - FIRST TIME: assume the patient has no prior medical background.",
    "chronic": "JOURNEY - CHRONIC: build on what the patient already knows about the condition.",
}

_DEPTH_LINES: dict[str, str] = {
    "minimal": "DEPTH - MINIMAL: only the essentials, kept brief.",
    "detailed": "DEPTH - DETAILED: full explanations, including numbers and likelihoods.",
}

_LANGUAGE_LINES: dict[str, str] = {
    "estonian": "LANGUAGE - ESTONIAN: write in Estonian using the polite \"Teie\" form.",
    "russian": "LANGUAGE - RUSSIAN: write in Russian using the polite \"Вы\" form.",
    "english": "LANGUAGE - ENGLISH: write in English, professional and empathetic.",
}


@dataclass(frozen=True, slots=True)
class PatientContext:
    """Normalized patient profile used to personalize prompts."""

    age: int = DEFAULT_GENERATION_AGE
    sex: Sex = "other"
    health_literacy: Literacy = "medium"
    language: Language = "english"
    journey_type: JourneyType | None = None
    mental_state: str | None = None
    comorbidities: str | None = None
    smoking_status: str | None = None
    risk_appetite: RiskAppetite = "moderate"

    @classmethod
    def from_patient_data(
        cls, data: Mapping[str, Any] | None, *, default_age: int = DEFAULT_GENERATION_AGE
    ) -> PatientContext:
        """Build a context from the free-form ``patientData`` sent by the client.

        Unknown or missing values fall back to the defaults; ``comorbidities``
        may be a list (joined with ``", "``) or a string.
        """
        data = data or {}
        comorbidities = data.get("comorbidities")
        if isinstance(comorbidities, (list, tuple)):
            comorbidities = ", ".join(str(item) for item in comorbidities if item) or None
        elif not isinstance(comorbidities, str) or not comorbidities:
            comorbidities = None

        return cls(
            age=_coerce_age(data.get("age"), default_age),
            sex=_pick(data.get("sex"), ("male", "female", "other"), "other"),
            health_literacy=_pick(data.get("healthLiteracy"), ("low", "medium", "high"), "medium"),
            language=_pick(data.get("language"), ("estonian", "russian", "english"), "english"),
            journey_type=_pick(
                data.get("journeyType"), ("elective", "emergency", "chronic", "first-time"), None
            ),
            mental_state=_text(data.get("mentalState")),
            comorbidities=comorbidities,
            smoking_status=_text(data.get("smokingStatus")),
            risk_appetite=_pick(
                data.get("riskAppetite"), ("minimal", "moderate", "detailed"), "moderate"
            ),
        )


def _coerce_age(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        age = int(float(value))
    except (TypeError, ValueError):
        return default
    return age if age > 0 else default


def _pick(value: Any, allowed: tuple[str, ...], default: Any) -> Any:
    return value if isinstance(value, str) and value in allowed else default


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) and value.strip() else None


# ── Blocks ───────────────────────────────────────────────────────────────


def personalization_instructions(ctx: PatientContext) -> str:
    lines = ["PERSONALIZATION:", _LITERACY_BLOCKS[ctx.health_literacy]]
    if ctx.age < 40:
        lines.append("AGE - YOUNGER: cover long-term effects on career, family and plans.")
    elif ctx.age >= 65:
        lines.append("AGE - OLDER: cover independence, mobility and life in retirement.")
    if ctx.journey_type in _JOURNEY_LINES:
        lines.append(_JOURNEY_LINES[ctx.journey_type])
    if ctx.risk_appetite in _DEPTH_LINES:
        lines.append(_DEPTH_LINES[ctx.risk_appetite])
    return "\n".join(lines)


def section_guidelines(language: str = "english") -> str:
    """Numbered list of the seven sections with their purpose.

    Titles stay in English for every output language so the client can map
    them back to its layout.
    """
    lines = ["SECTIONS:"]
    for number, (title, purpose) in enumerate(zip(SECTION_TITLES, SECTION_PURPOSES), start=1):
        lines.append(f"{number}. {title}: {purpose}")
    return "\n".join(lines)


def language_guidelines(language: str) -> str:
    return _LANGUAGE_LINES.get(language, _LANGUAGE_LINES["english"])


def _profile_block(ctx: PatientContext) -> str:
    return "\n".join(
        [
            "PATIENT PROFILE:",
            f"- Age: {ctx.age}",
            f"- Sex: {ctx.sex}",
            f"- Health literacy: {ctx.health_literacy}",
            f"- Language: {ctx.language}",
            f"- Journey type: {ctx.journey_type or 'not specified'}",
            f"- Mental state: {ctx.mental_state or 'not specified'}",
            f"- Comorbidities: {ctx.comorbidities or 'none'}",
            f"- Smoking status: {ctx.smoking_status or 'not specified'}",
            f"- Information preference: {ctx.risk_appetite}",
        ]
    )


def _json_contract() -> str:
    keys = ",\n".join(f'  "{key}": "..."' for key in SECTION_KEYS)
    return "Reply with ONLY a JSON object, no prose and no code fences, with exactly these keys:\n{\n" + keys + "\n}"


# ── Full prompts ─────────────────────────────────────────────────────────


def build_generation_prompt(technical_note: str, ctx: PatientContext) -> str:
    """Prompt that asks for the complete seven-section document as JSON."""
    return "\n\n".join(
        [
            SYSTEM_PROMPT,
            "Write the patient document for the note below.",
            _json_contract(),
            f"CLINICAL NOTE:\n{technical_note}",
            _profile_block(ctx),
            personalization_instructions(ctx),
            section_guidelines(ctx.language),
            language_guidelines(ctx.language),
            SAFETY_RULES,
        ]
    )


def build_retry_prompt(base_prompt: str, previous_failure: str) -> str:
    return (
        f"PREVIOUS ATTEMPT FAILED WITH: {previous_failure}\n"
        "Retry with strict JSON compliance.\n\n"
        f"{base_prompt}"
    )


def _join_list(value: Any, empty: str) -> str:
    if isinstance(value, (list, tuple)) and value:
        return ", ".join(str(item) for item in value)
    return empty


def analysis_summary(analysis: Mapping[str, Any] | None) -> str:
    """Render the structured fields extracted from the note."""
    analysis = analysis if isinstance(analysis, Mapping) else {}
    return "\n".join(
        [
            "EXTRACTED MEDICAL INFORMATION:",
            f"- Primary diagnosis: {analysis.get('primaryDiagnosis') or 'not specified'}",
            f"- Secondary diagnoses: {_join_list(analysis.get('secondaryDiagnoses'), 'none')}",
            f"- Medications: {_join_list(analysis.get('medications'), 'none listed')}",
            f"- Procedures: {_join_list(analysis.get('procedures'), 'none')}",
            f"- Test results: {_join_list(analysis.get('testResults'), 'none')}",
            f"- Follow-up plans: {_join_list(analysis.get('followUpPlans'), 'none')}",
        ]
    )


def build_section_prompt(
    *,
    section_index: int,
    section_title: str,
    technical_note: str,
    ctx: PatientContext,
    analysis: Mapping[str, Any] | None = None,
    current_content: str | None = None,
) -> str:
    """Prompt that rewrites one section (``section_index`` 0..6) as plain text."""
    if not 0 <= section_index < len(SECTION_FOCUS):
        raise ValueError(f"section_index must be between 0 and {len(SECTION_FOCUS) - 1}")

    blocks = [
        SYSTEM_PROMPT,
        f"TECHNICAL NOTE:\n{technical_note}",
        analysis_summary(analysis),
        _profile_block(ctx),
        personalization_instructions(ctx),
        language_guidelines(ctx.language),
        SAFETY_RULES,
        f'SECTION TO REWRITE: "{section_title}"\nFOCUS: {SECTION_FOCUS[section_index]}',
    ]
    if current_content:
        blocks.append(f"CURRENT VERSION (improve on it):\n{current_content}")
    blocks.append("Reply with ONLY the text of this section.")
    return "\n\n".join(blocks)


OCR_INSTRUCTION = (
    "Transcribe all text visible in this document exactly as written. "
    "Return only the transcribed text."
)


def build_ocr_messages(file_data: str) -> list[dict[str, Any]]:
    """Multimodal chat message asking the vision model to transcribe *file_data*."""
    return [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": OCR_INSTRUCTION},
                {"type": "image_url", "image_url": {"url": file_data}},
            ],
        }
    ]
