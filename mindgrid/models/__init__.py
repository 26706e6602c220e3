"""
Data models package for the MindGrid API.

This package contains Pydantic models for request/response validation
and the provider-answer contracts used by the AI endpoints.
"""

# Import request models
from .requests import (
    IMAGE_QUALITIES,
    IMAGE_SIZES,
    NODE_TYPES,
    CreateCanvasRequest,
    CreateFolderRequest,
    CreateSubCanvasRequest,
    GraphEdge,
    GraphNode,
    ImageRequest,
    RenameCanvasRequest,
    SaveGraphRequest,
    SuggestionsRequest,
    TextAnalysisRequest,
    TextRequest,
    UpdateSettingsRequest,
)

# Import response models
from .responses import (
    AnalysisOption,
    CreateCanvasResponse,
    ImageResponse,
    SaveGraphResponse,
    SettingsResponse,
    Suggestion,
    SuggestionsResponse,
    TextAnalysisResponse,
    TextResponse,
    UploadResponse,
)

# Export all models for easier access
__all__ = [
    # Constants
    "IMAGE_QUALITIES",
    "IMAGE_SIZES",
    "NODE_TYPES",
    # Request models
    "CreateCanvasRequest",
    "CreateFolderRequest",
    "CreateSubCanvasRequest",
    "GraphEdge",
    "GraphNode",
    "ImageRequest",
    "RenameCanvasRequest",
    "SaveGraphRequest",
    "SuggestionsRequest",
    "TextAnalysisRequest",
    "TextRequest",
    "UpdateSettingsRequest",
    # Response models
    "AnalysisOption",
    "CreateCanvasResponse",
    "ImageResponse",
    "SaveGraphResponse",
    "SettingsResponse",
    "Suggestion",
    "SuggestionsResponse",
    "TextAnalysisResponse",
    "TextResponse",
    "UploadResponse",
]
