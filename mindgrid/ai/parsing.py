"""Validation of provider answers and request options."""

import json
from dataclasses import dataclass

from pydantic import ValidationError

from mindgrid.exceptions.errors import ContractViolationError, UserInputError
from mindgrid.models.requests import IMAGE_QUALITIES, IMAGE_SIZES
from mindgrid.models.responses import SuggestionsResponse, TextAnalysisResponse
from mindgrid.utils.debug import print__ai_debug

SUGGESTIONS_PARSE_ERROR = "Failed to parse AI suggestions"
ANALYSIS_PARSE_ERROR = "Failed to parse AI analysis"


# ==============================================================================
# PROVIDER ANSWERS
# ==============================================================================
def _load_json(content, error_message):
    if not content:
        raise ContractViolationError(error_message)
    try:
        return json.loads(content)
    except (TypeError, ValueError) as exc:
        print__ai_debug(f"Error parsing AI response: {exc}")
        raise ContractViolationError(error_message) from exc


def parse_suggestions(content) -> SuggestionsResponse:
    """Parse the JSON answer of the suggestions prompt.

    Accepts ``{"suggestions": [...]}`` or a bare list; either way exactly
    three ``{suggestion, explanation}`` items are required.

    Raises:
        ContractViolationError: any other shape.
    """
    parsed = _load_json(content, SUGGESTIONS_PARSE_ERROR)
    if isinstance(parsed, dict):
        items = parsed.get("suggestions")
    else:
        items = parsed
    if not isinstance(items, list):
        print__ai_debug("Error parsing AI response: no suggestions array")
        raise ContractViolationError(SUGGESTIONS_PARSE_ERROR)
    try:
        return SuggestionsResponse(suggestions=items)
    except ValidationError as exc:
        print__ai_debug(f"Error parsing AI response: {exc.error_count()} validation error(s)")
        raise ContractViolationError(SUGGESTIONS_PARSE_ERROR) from exc


def parse_json_object(content, error_message):
    """Parse a JSON object answer; an empty answer counts as ``{}``."""
    if not content:
        return {}
    parsed = _load_json(content, error_message)
    if not isinstance(parsed, dict):
        print__ai_debug(f"Expected a JSON object, got {type(parsed).__name__}")
        raise ContractViolationError(error_message)
    return parsed


def parse_text_analysis(content) -> TextAnalysisResponse:
    """Parse the analysis answer: an ``analysis`` string plus 3-5 options."""
    parsed = _load_json(content, ANALYSIS_PARSE_ERROR)
    if not isinstance(parsed, dict):
        raise ContractViolationError(ANALYSIS_PARSE_ERROR)
    try:
        return TextAnalysisResponse.model_validate(parsed)
    except ValidationError as exc:
        print__ai_debug(f"Error parsing AI analysis: {exc.error_count()} validation error(s)")
        raise ContractViolationError(ANALYSIS_PARSE_ERROR) from exc


# ==============================================================================
# REQUEST OPTIONS
# ==============================================================================
@dataclass(frozen=True)
class ImageOptions:
    """Recognized image options.

    size: 1024x1024 (default), 1792x1024 or 1024x1792
    quality: standard (default) or hd
    """

    size: str = "1024x1024"
    quality: str = "standard"

    @classmethod
    def from_request(cls, size=None, quality=None):
        size = size or cls.size
        quality = quality or cls.quality
        if size not in IMAGE_SIZES:
            raise UserInputError(
                f"Invalid size. Expected one of: {', '.join(IMAGE_SIZES)}"
            )
        if quality not in IMAGE_QUALITIES:
            raise UserInputError(
                f"Invalid quality. Expected one of: {', '.join(IMAGE_QUALITIES)}"
            )
        return cls(size=size, quality=quality)
