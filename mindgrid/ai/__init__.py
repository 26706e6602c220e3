"""
AI package for the MindGrid backend.

Prompt templates, OpenAI calls made with the caller's key, and validation of
the provider's structured answers.
"""

from .content_analysis import analyze_content, looks_like_console_log
from .mindmap_layout import MindMapLayout, generate_mind_map
from .openai_client import chat_completion, generate_image, to_upstream_error
from .parsing import ImageOptions, parse_json_object, parse_suggestions, parse_text_analysis
from .prompts import (
    DEFAULT_GENERATE_PROMPT,
    TEXT_ACTIONS,
    build_suggestions_messages,
    build_text_analysis_messages,
    build_text_messages,
)

__all__ = [
    "DEFAULT_GENERATE_PROMPT",
    "ImageOptions",
    "MindMapLayout",
    "TEXT_ACTIONS",
    "analyze_content",
    "build_suggestions_messages",
    "build_text_analysis_messages",
    "build_text_messages",
    "chat_completion",
    "generate_image",
    "generate_mind_map",
    "looks_like_console_log",
    "parse_json_object",
    "parse_suggestions",
    "parse_text_analysis",
    "to_upstream_error",
]
