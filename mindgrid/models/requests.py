"""Request models for the MindGrid API."""

# Standard imports
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ============================================================
# NODE TYPES
# ============================================================
# Allow-list enforced by the nodes_type_check constraint
NODE_TYPES = (
    "text",
    "image",
    "video",
    "file",
    "link",
    "ai-response",
    "headline",
    "sticky",
    "emoji",
    "group",
    "synapse",
)

IMAGE_SIZES = ("1024x1024", "1792x1024", "1024x1792")
IMAGE_QUALITIES = ("standard", "hd")


# ============================================================
# AI REQUEST MODELS
# ============================================================
# Required fields are Optional here: the endpoints check the session and the
# stored API key before reporting a missing field as a 400.


class TextRequest(BaseModel):
    """Body of ``POST /api/ai/text``."""

    action: Optional[str] = Field(
        None,
        description="improve | expand | summarize | fix-grammar | generate | make-professional | make-casual",
        examples=["improve"],
    )
    text: Optional[str] = Field(None, description="Text to transform")
    context: Optional[str] = Field(
        None, description="Prompt for the generate action"
    )


class ImageRequest(BaseModel):
    """Body of ``POST /api/ai/image``.

    ``size`` and ``quality`` fall back to the provider defaults used by the
    canvas editor when omitted.
    """

    prompt: Optional[str] = Field(None, examples=["A neural network as a city"])
    size: Optional[str] = Field("1024x1024", examples=list(IMAGE_SIZES))
    quality: Optional[str] = Field("standard", examples=list(IMAGE_QUALITIES))


class SuggestionsRequest(BaseModel):
    text: Optional[str] = Field(None, description="Current node text, may be empty")
    instructions: Optional[str] = Field(None, description="How to rewrite the text")


class TextAnalysisRequest(BaseModel):
    text: Optional[str] = None
    instructions: Optional[str] = None


# ============================================================
# CANVAS REQUEST MODELS
# ============================================================
class CreateCanvasRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=255, examples=["My Thought Map"])
    description: Optional[str] = None
    folder_id: Optional[str] = None


class RenameCanvasRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=255)


class GraphNode(BaseModel):
    """A node as sent by the canvas editor.

    Layout fields (``width``, ``height``, ``parentNode``, ``extent``,
    ``zIndex``) are kept; other editor state (``selected``, ``dragging``, ...)
    is ignored.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(..., min_length=1)
    type: str
    position: Dict[str, float] = Field(default_factory=lambda: {"x": 0, "y": 0})
    data: Dict[str, Any] = Field(default_factory=dict)
    style: Dict[str, Any] = Field(default_factory=dict)
    width: Optional[float] = None
    height: Optional[float] = None
    parent_node: Optional[str] = Field(None, alias="parentNode")
    extent: Optional[str] = None
    z_index: Optional[int] = Field(None, alias="zIndex")

    @field_validator("data", "style", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or {}


class GraphEdge(BaseModel):
    """An edge as sent by the canvas editor, handles and data included."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(..., min_length=1)
    source: str
    target: str
    source_handle: Optional[str] = Field(None, alias="sourceHandle")
    target_handle: Optional[str] = Field(None, alias="targetHandle")
    type: Optional[str] = "default"
    label: Optional[str] = None
    style: Dict[str, Any] = Field(default_factory=dict)
    data: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", "style", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or {}

    @field_validator("type", mode="before")
    @classmethod
    def default_type(cls, v):
        return v or "default"


class SaveGraphRequest(BaseModel):
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)


class CreateSubCanvasRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    parent_node_id: Optional[str] = Field(None, alias="parentNodeId")
    group_name: Optional[str] = Field(None, alias="groupName")


# ============================================================
# FOLDER / SETTINGS REQUEST MODELS
# ============================================================
class CreateFolderRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    color: Optional[str] = Field("#6366f1", examples=["#6366f1"])
    parent_id: Optional[str] = None


class UpdateSettingsRequest(BaseModel):
    openai_api_key: Optional[str] = Field(
        None, description="OpenAI key; empty or null clears the stored key"
    )




# ============================================================
# AI MIND MAP REQUEST MODELS
# ============================================================
class AnalyzeContentRequest(BaseModel):
    """Body of ``POST /api/ai/analyze-content``: a pasted conversation or document."""

    content: Optional[str] = None
    title: Optional[str] = None


class MindMapAnalysis(BaseModel):
    """Output of analyze-content, posted back to ``/api/ai/generate-mindmap``.

    Only ``structure`` is required; the layout engine tolerates missing or
    partial sections of the provider's answer.
    """

    model_config = ConfigDict(extra="allow")

    metadata: Dict[str, Any] = Field(default_factory=dict)
    structure: Optional[Dict[str, Any]] = None
    layout: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("metadata", "layout", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or {}


class AISubCanvas(BaseModel):
    """Graph placed behind one synapse node of an AI-generated canvas."""

    model_config = ConfigDict(populate_by_name=True)

    synapse_id: str = Field(..., alias="synapseId", min_length=1)
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)


class CreateCanvasFromAIRequest(BaseModel):
    """Body of ``POST /api/canvas/create-from-ai``.

    ``nodes`` and ``edges`` may be empty lists but must be present.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    nodes: Optional[List[GraphNode]] = None
    edges: Optional[List[GraphEdge]] = None
    folder_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    sub_canvases: List[AISubCanvas] = Field(default_factory=list, alias="subCanvases")

    @field_validator("metadata", mode="before")
    @classmethod
    def metadata_none_to_empty(cls, v):
        return v or {}

    @field_validator("sub_canvases", mode="before")
    @classmethod
    def sub_canvases_none_to_empty(cls, v):
        return v or []
