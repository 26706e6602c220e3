"""Response models for the MindGrid API.

The AI payload models double as the contract the provider's JSON answer must
satisfy before it is passed on to the canvas editor.
"""

# Standard imports
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================
# AI RESPONSE MODELS
# ============================================================
class Suggestion(BaseModel):
    suggestion: str
    explanation: str


class SuggestionsResponse(BaseModel):
    """Exactly three rewrite suggestions."""

    suggestions: List[Suggestion] = Field(..., min_length=3, max_length=3)


class AnalysisOption(BaseModel):
    title: str
    content: str
    reasoning: str


class TextAnalysisResponse(BaseModel):
    """Short analysis plus three to five alternative options."""

    analysis: str
    options: List[AnalysisOption] = Field(..., min_length=3, max_length=5)


class TextResponse(BaseModel):
    text: str
    usage: Optional[Dict[str, Any]] = None


class ImageResponse(BaseModel):
    url: str
    revised_prompt: Optional[str] = None


# ============================================================
# CANVAS RESPONSE MODELS
# ============================================================
class CreateCanvasResponse(BaseModel):
    canvas: Dict[str, Any]
    redirect_to: str


class SaveGraphResponse(BaseModel):
    canvas_id: str
    nodes_saved: int
    edges_saved: int
    nodes_deleted: int
    edges_deleted: int


class UploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    file_name: str = Field(..., alias="fileName")
    file_size: int = Field(..., alias="fileSize")
    file_type: str = Field(..., alias="fileType")


class SettingsResponse(BaseModel):
    has_openai_api_key: bool
