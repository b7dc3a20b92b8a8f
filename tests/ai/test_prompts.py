"""Tests for prompt assembly."""

from __future__ import annotations

import pytest

from notebridge.ai import prompts
from notebridge.ai.prompts import PatientContext
from notebridge.ai.validation import SECTION_KEYS


class TestPatientContext:
    """``patientData`` from the client is normalized with safe defaults."""

    def test_defaults(self):
        ctx = PatientContext.from_patient_data(None)
        assert ctx.age == 65
        assert ctx.sex == "other"
        assert ctx.health_literacy == "medium"
        assert ctx.language == "english"
        assert ctx.risk_appetite == "moderate"
        assert ctx.journey_type is None

    def test_section_default_age(self):
        ctx = PatientContext.from_patient_data({}, default_age=prompts.DEFAULT_SECTION_AGE)
        assert ctx.age == 50

    def test_camel_case_keys(self):
        ctx = PatientContext.from_patient_data(
            {
                "age": "34",
                "sex": "female",
                "healthLiteracy": "low",
                "language": "estonian",
                "journeyType": "emergency",
                "riskAppetite": "detailed",
                "mentalState": "anxious",
                "smokingStatus": "never",
            }
        )
        assert ctx.age == 34
        assert ctx.sex == "female"
        assert ctx.health_literacy == "low"
        assert ctx.language == "estonian"
        assert ctx.journey_type == "emergency"
        assert ctx.risk_appetite == "detailed"
        assert ctx.mental_state == "anxious"
        assert ctx.smoking_status == "never"

    def test_unknown_values_fall_back(self):
        ctx = PatientContext.from_patient_data(
            {"age": "old", "healthLiteracy": "expert", "language": "latvian"}
        )
        assert ctx.age == 65
        assert ctx.health_literacy == "medium"
        assert ctx.language == "english"

    def test_comorbidities_list_joined(self):
        ctx = PatientContext.from_patient_data({"comorbidities": ["diabetes", "", "asthma"]})
        assert ctx.comorbidities == "diabetes, asthma"

    def test_empty_comorbidities(self):
        assert PatientContext.from_patient_data({"comorbidities": []}).comorbidities is None


class TestPersonalization:
    def test_literacy_block(self):
        text = prompts.personalization_instructions(PatientContext(health_literacy="low"))
        assert text.startswith("PERSONALIZATION:")
        assert "HEALTH LITERACY - LOW" in text

    def test_younger_patient(self):
        assert "AGE - YOUNGER" in prompts.personalization_instructions(PatientContext(age=30))

    def test_older_patient(self):
        assert "AGE - OLDER" in prompts.personalization_instructions(PatientContext(age=65))

    def test_middle_age_has_no_age_block(self):
        text = prompts.personalization_instructions(PatientContext(age=50))
        assert "AGE -" not in text

    def test_journey_and_depth(self):
        text = prompts.personalization_instructions(
            PatientContext(journey_type="chronic", risk_appetite="minimal")
        )
        assert "JOURNEY - CHRONIC" in text
        assert "DEPTH - MINIMAL" in text


class TestGenerationPrompt:
    def test_contains_note_and_contract(self):
        ctx = PatientContext(language="russian")
        prompt = prompts.build_generation_prompt("Atrial fibrillation, start apixaban.", ctx)
        assert "Atrial fibrillation, start apixaban." in prompt
        for key in SECTION_KEYS:
            assert f'"{key}"' in prompt
        assert "LANGUAGE - RUSSIAN" in prompt
        assert "SAFETY RULES:" in prompt

    def test_section_titles_listed(self):
        prompt = prompts.build_generation_prompt("note", PatientContext())
        for number, title in enumerate(prompts.SECTION_TITLES, start=1):
            assert f"{number}. {title}:" in prompt

    def test_retry_prefix(self):
        retry = prompts.build_retry_prompt("BASE", "VALIDATION ERRORS:\n1. x\n")
        assert retry.startswith("PREVIOUS ATTEMPT FAILED WITH: VALIDATION ERRORS:")
        assert "Retry with strict JSON compliance.\n\nBASE" in retry


class TestSectionPrompt:
    def test_focus_and_current_content(self):
        prompt = prompts.build_section_prompt(
            section_index=5,
            section_title="WARNING SIGNS",
            technical_note="note",
            ctx=PatientContext(),
            current_content="old text",
        )
        assert 'SECTION TO REWRITE: "WARNING SIGNS"' in prompt
        assert prompts.SECTION_FOCUS[5] in prompt
        assert "CURRENT VERSION (improve on it):\nold text" in prompt

    def test_without_current_content(self):
        prompt = prompts.build_section_prompt(
            section_index=0, section_title="WHAT DO I HAVE", technical_note="note", ctx=PatientContext()
        )
        assert "CURRENT VERSION" not in prompt

    @pytest.mark.parametrize("index", [-1, 7])
    def test_index_out_of_range(self, index):
        with pytest.raises(ValueError):
            prompts.build_section_prompt(
                section_index=index, section_title="x", technical_note="note", ctx=PatientContext()
            )

    def test_analysis_summary(self):
        text = prompts.analysis_summary(
            {"primaryDiagnosis": "Hypertension", "medications": ["lisinopril", "aspirin"]}
        )
        assert "- Primary diagnosis: Hypertension" in text
        assert "- Medications: lisinopril, aspirin" in text
        assert "- Procedures: none" in text

    def test_analysis_summary_missing(self):
        assert "- Primary diagnosis: not specified" in prompts.analysis_summary(None)


class TestOcrMessages:
    def test_multimodal_message(self):
        messages = prompts.build_ocr_messages("data:image/png;base64,AAAA")
        assert len(messages) == 1
        content = messages[0]["content"]
        assert content[0] == {"type": "text", "text": prompts.OCR_INSTRUCTION}
        assert content[1]["image_url"]["url"] == "data:image/png;base64,AAAA"
