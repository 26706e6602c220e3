"""Staged analysis of a conversation or document for mind map generation.

Stage 1 extracts the headlines, stage 2 the sections of every headline, and
stage 3 the details of every section. Cross-cutting elements and the layout
plan (stages 4 and 5) are requested together at the end. Calls within a
stage run concurrently and share one client.
"""

import asyncio
import re
from datetime import datetime, timezone

from mindgrid.ai.openai_client import chat_completion, create_client
from mindgrid.ai.parsing import parse_json_object
from mindgrid.ai.prompts import (
    build_cross_cutting_messages,
    build_details_messages,
    build_headlines_messages,
    build_layout_messages,
    build_sections_messages,
)
from mindgrid.config.settings import (
    MINDMAP_CROSS_CUTTING_MAX_TOKENS,
    MINDMAP_DETAILS_MAX_TOKENS,
    MINDMAP_HEADLINES_MAX_TOKENS,
    MINDMAP_LAYOUT_MAX_TOKENS,
    MINDMAP_SECTIONS_MAX_TOKENS,
    MINDMAP_TEMPERATURE,
    OPENAI_ANALYSIS_MODEL,
)
from mindgrid.utils.debug import print__ai_debug

ANALYSIS_STAGES = 5
ANALYZE_FAILED = "Failed to analyze content"
CONSOLE_LOG_MESSAGE = (
    "The content appears to be console logs or error messages. "
    "Please paste the actual conversation or document content instead."
)

CONSOLE_LOG_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"Failed to load resource",
        r"console\.(log|error|warn)",
        r"react-dom.*\.js:\d+",
        r"Uncaught Error",
        r"npm ERR!",
        r"node_modules",
        r"webpack",
        r"Failed to compile",
        r"SyntaxError",
        r"TypeError",
        r"Saving nodes: Array",
        r"Saving edges: Array",
    )
]
ERROR_WORD_PATTERN = re.compile(r"error|failed|exception", re.IGNORECASE)
# Share of lines that may mention errors before content counts as a log dump
ERROR_LINE_RATIO = 0.3


def looks_like_console_log(content: str) -> bool:
    """True when the text is a browser console or build log, not a conversation."""
    if any(pattern.search(content) for pattern in CONSOLE_LOG_PATTERNS):
        return True
    error_words = len(ERROR_WORD_PATTERN.findall(content))
    return error_words > len(content.split("\n")) * ERROR_LINE_RATIO


def _list_of_objects(value):
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


async def _ask(api_key, client, messages, max_tokens):
    content, _usage = await chat_completion(
        api_key,
        model=OPENAI_ANALYSIS_MODEL,
        messages=messages,
        temperature=MINDMAP_TEMPERATURE,
        max_tokens=max_tokens,
        json_mode=True,
        fallback_message=ANALYZE_FAILED,
        client=client,
    )
    return parse_json_object(content, ANALYZE_FAILED)


async def analyze_content(api_key: str, content: str, title=None, client=None):
    """Run the five analysis stages over ``content``.

    Returns:
        dict: ``metadata``, ``structure`` (headlines with their sections and
        details, plus ``crossCutting``) and ``layout``.

    Raises:
        UpstreamProviderError: a provider call failed.
        ContractViolationError: a provider answer was not a JSON object.
    """
    client = client or create_client(api_key)

    print__ai_debug("🧠 Stage 1: extracting headlines")
    stage_one = await _ask(api_key, client, build_headlines_messages(content), MINDMAP_HEADLINES_MAX_TOKENS)
    headlines = _list_of_objects(stage_one.get("headlines"))

    print__ai_debug(f"🧠 Stage 2: extracting sections for {len(headlines)} headline(s)")
    section_answers = await asyncio.gather(
        *(
            _ask(api_key, client, build_sections_messages(content, headline), MINDMAP_SECTIONS_MAX_TOKENS)
            for headline in headlines
        )
    )
    for headline, answer in zip(headlines, section_answers):
        headline["sections"] = _list_of_objects(answer.get("sections"))

    pairs = [(headline, section) for headline in headlines for section in headline["sections"]]
    print__ai_debug(f"🧠 Stage 3: extracting details for {len(pairs)} section(s)")
    detail_answers = await asyncio.gather(
        *(
            _ask(api_key, client, build_details_messages(content, headline, section), MINDMAP_DETAILS_MAX_TOKENS)
            for headline, section in pairs
        )
    )
    for (_headline, section), answer in zip(pairs, detail_answers):
        details = answer.get("details")
        section["details"] = details if isinstance(details, dict) else {}

    print__ai_debug("🧠 Stages 4-5: cross-cutting elements and layout")
    headline_titles = [headline.get("title") for headline in headlines]
    section_counts = [len(headline["sections"]) for headline in headlines]
    cross_cutting, layout = await asyncio.gather(
        _ask(
            api_key,
            client,
            build_cross_cutting_messages(content, headline_titles),
            MINDMAP_CROSS_CUTTING_MAX_TOKENS,
        ),
        _ask(api_key, client, build_layout_messages(section_counts), MINDMAP_LAYOUT_MAX_TOKENS),
    )

    total_points = sum(
        len((section.get("details") or {}).get("keyPoints") or [])
        for _headline, section in pairs
    )
    return {
        "metadata": {
            "title": title or stage_one.get("centralTheme") or "Untitled Analysis",
            "centralTheme": stage_one.get("centralTheme") or "",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "contentLength": len(content),
            "analysisStages": ANALYSIS_STAGES,
            "extractedElements": {
                "headlines": len(headlines),
                "sections": len(pairs),
                "totalPoints": total_points,
            },
        },
        "structure": {
            "headlines": headlines,
            "crossCutting": cross_cutting,
        },
        "layout": layout,
    }
