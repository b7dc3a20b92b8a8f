"""WatsonX integration - client, prompts, output validation and generation."""

from notebridge.ai.generator import DocumentGenerator, GeneratedDocument, parse_model_json
from notebridge.ai.validation import ValidationResult, format_validation_errors, validate_document
from notebridge.ai.watsonx import ChatOptions, TokenCache, WatsonxClient

__all__ = [
    "DocumentGenerator",
    "GeneratedDocument",
    "parse_model_json",
    "ValidationResult",
    "format_validation_errors",
    "validate_document",
    "ChatOptions",
    "TokenCache",
    "WatsonxClient",
]
