"""Prompt templates for the AI endpoints."""

import json
from dataclasses import dataclass

DEFAULT_GENERATE_PROMPT = "Write something interesting and relevant."


@dataclass(frozen=True)
class TextAction:
    """One entry of the text action table.

    ``uses_context`` actions take their user message from ``context`` (or
    the default prompt) and do not require ``text``.
    """

    name: str
    system_message: str
    uses_context: bool = False


TEXT_ACTIONS = {
    action.name: action
    for action in (
        TextAction(
            "improve",
            "You are a helpful writing assistant. Improve the following text while "
            "maintaining its core meaning and tone. Make it clearer, more concise, "
            "and more engaging.",
        ),
        TextAction(
            "expand",
            "You are a helpful writing assistant. Expand the following text with more "
            "detail and context while maintaining the original tone and intent.",
        ),
        TextAction(
            "summarize",
            "You are a helpful writing assistant. Summarize the following text "
            "concisely while preserving the key points.",
        ),
        TextAction(
            "fix-grammar",
            "You are a grammar and spelling checker. Fix any grammatical errors, "
            "spelling mistakes, and punctuation issues in the following text. Only "
            "make necessary corrections.",
        ),
        TextAction(
            "generate",
            "You are a helpful writing assistant. Generate text based on the "
            "following prompt or context.",
            uses_context=True,
        ),
        TextAction(
            "make-professional",
            "You are a professional writing assistant. Rewrite the following text in "
            "a more professional and formal tone suitable for business communication.",
        ),
        TextAction(
            "make-casual",
            "You are a friendly writing assistant. Rewrite the following text in a "
            "more casual and conversational tone.",
        ),
    )
}


def build_text_messages(action: TextAction, text=None, context=None):
    if action.uses_context:
        user_message = context or DEFAULT_GENERATE_PROMPT
    else:
        user_message = text
    return [
        {"role": "system", "content": action.system_message},
        {"role": "user", "content": user_message},
    ]


SUGGESTIONS_SYSTEM_MESSAGE = """You are a helpful writing assistant. The user will provide some text (which may be empty) and instructions for how they want to modify or create text.

Your task is to generate 3 different suggestions that follow the user's instructions. Each suggestion should be a complete piece of text that could replace the current text.

Return your response as a JSON object with a "suggestions" key containing an array of exactly 3 objects, each containing:
- "suggestion": the suggested text
- "explanation": a brief explanation of what changes were made or why this suggestion was created (1-2 sentences)

Example format:
{
  "suggestions": [
    {
      "suggestion": "Your suggested text here",
      "explanation": "This version emphasizes clarity and conciseness."
    },
    {
      "suggestion": "Another suggested text",
      "explanation": "This approach takes a more formal tone."
    },
    {
      "suggestion": "Third suggested text",
      "explanation": "This option adds more detail and context."
    }
  ]
}"""


def build_suggestions_messages(text, instructions):
    user_message = (
        f'Current text: "{text or "[Empty - please create new text]"}"\n\n'
        f"Instructions: {instructions}"
    )
    return [
        {"role": "system", "content": SUGGESTIONS_SYSTEM_MESSAGE},
        {"role": "user", "content": user_message},
    ]


TEXT_ANALYSIS_SYSTEM_MESSAGE = """You are an AI assistant that analyzes text and generates multiple options based on user instructions.

Your task:
1. Analyze the provided text
2. Follow the user's custom instructions
3. Generate 3-5 different options/variations
4. Each option should be distinct and valuable

Return your response in JSON format:
{
  "analysis": "Brief analysis of the original text",
  "options": [
    {
      "title": "Short descriptive title for this option",
      "content": "The generated content",
      "reasoning": "Why this option might be useful"
    }
  ]
}"""


def build_text_analysis_messages(text, instructions):
    return [
        {"role": "system", "content": TEXT_ANALYSIS_SYSTEM_MESSAGE},
        {
            "role": "user",
            "content": f'Text to analyze: "{text}"\n\nInstructions: {instructions}',
        },
    ]


# ==============================================================================
# MIND MAP ANALYSIS
# ==============================================================================
# Five prompts: headlines, sections per headline, details per section, then
# cross-cutting elements and layout, which run side by side.

HEADLINES_SYSTEM_MESSAGE = """You are an expert at identifying the main topics and chapters in conversations and documents.

Your task is to extract the MAIN HEADLINES or CHAPTERS - the big topics that were discussed.
Think of these as chapter titles in a book about this conversation.

Guidelines:
- Extract 3-7 main headlines
- Each headline should be specific and descriptive
- Use the actual terminology from the conversation
- Order them as they appear or by importance

Return JSON:
{
  "centralTheme": "One sentence describing what this entire conversation is about",
  "headlines": [
    {
      "id": "headline_1",
      "title": "Specific, descriptive headline",
      "order": 1,
      "summary": "One sentence about what this section covers"
    }
  ]
}"""


def build_headlines_messages(content):
    return [
        {"role": "system", "content": HEADLINES_SYSTEM_MESSAGE},
        {
            "role": "user",
            "content": f"Extract the main headlines/chapters from this content:\n\n{content}",
        },
    ]


def build_sections_messages(content, headline):
    system_message = f"""You are analyzing the section "{headline.get('title')}" from a larger conversation.

Extract the KEY SECTIONS or SUBTOPICS within this main topic.
Think of these as the main points discussed under this headline.

Guidelines:
- Extract 2-6 key sections
- Each section should be a distinct subtopic or point
- Be specific - use actual terms and concepts mentioned
- Include brief context for each section

Return JSON:
{{
  "headlineId": "{headline.get('id')}",
  "sections": [
    {{
      "id": "section_1",
      "title": "Specific section title",
      "context": "Brief description of what this section covers",
      "hasDetails": true
    }}
  ]
}}"""
    return [
        {"role": "system", "content": system_message},
        {
            "role": "user",
            "content": f'Find all sections related to "{headline.get("title")}" in this content:\n\n{content}',
        },
    ]


def build_details_messages(content, headline, section):
    system_message = f"""You are extracting detailed information for the section "{section.get('title')}" under the headline "{headline.get('title')}".

Extract ALL supporting points, details, and information for this specific section.

Include:
- Key points and arguments
- Specific examples mentioned
- Data, numbers, or metrics
- Quotes or important statements
- Action items or recommendations
- Any other relevant details

Be comprehensive - don't miss anything related to this section.

Return JSON:
{{
  "sectionId": "{section.get('id')}",
  "details": {{
    "keyPoints": ["Point 1", "Point 2"],
    "examples": ["Example 1", "Example 2"],
    "data": ["Data point 1", "Data point 2"],
    "quotes": [{{"text": "Quote", "speaker": "Who said it"}}],
    "actionItems": ["Action 1", "Action 2"],
    "additionalDetails": ["Detail 1", "Detail 2"]
  }}
}}"""
    return [
        {"role": "system", "content": system_message},
        {
            "role": "user",
            "content": (
                f'Extract all details for "{section.get("title")}" '
                f'(under "{headline.get("title")}") from this content:\n\n{content}'
            ),
        },
    ]


CROSS_CUTTING_SYSTEM_MESSAGE = """You are identifying insights, patterns, and connections that span across multiple topics in the conversation.

Extract:
1. KEY INSIGHTS - Important realizations or learnings that apply broadly
2. OVERARCHING THEMES - Patterns that appear across different sections
3. CONNECTIONS - How different topics relate to each other
4. GLOBAL ACTION ITEMS - Things to do that aren't tied to one section
5. IMPORTANT CONTEXT - Background info, participants, setting

These should be things that don't belong to just one section but are important to the whole conversation.

Return JSON:
{
  "insights": [
    {
      "text": "The insight",
      "importance": "high/medium/low",
      "relatedHeadlines": ["headline_id1", "headline_id2"]
    }
  ],
  "themes": [
    {
      "name": "Theme name",
      "description": "How this theme appears throughout"
    }
  ],
  "connections": [
    {
      "from": "headline_id or section_id",
      "to": "headline_id or section_id",
      "relationship": "How they connect"
    }
  ],
  "globalActions": [
    {
      "action": "What to do",
      "priority": "high/medium/low",
      "context": "Why this is important"
    }
  ],
  "context": {
    "participants": ["Name 1", "Name 2"],
    "setting": "Where/when this took place",
    "purpose": "Why this conversation happened"
  }
}"""


def build_cross_cutting_messages(content, headline_titles):
    return [
        {"role": "system", "content": CROSS_CUTTING_SYSTEM_MESSAGE},
        {
            "role": "user",
            "content": (
                "Identify cross-cutting elements from this conversation. Here are the "
                f"main topics identified: {json.dumps(headline_titles)}\n\nFull content:\n{content}"
            ),
        },
    ]


def build_layout_messages(section_counts):
    system_message = f"""Based on the extracted structure, determine the optimal mind map layout.

Consider:
- Number of main headlines: {len(section_counts)}
- Total sections: {sum(section_counts)}
- Depth of detail
- Presence of potential cross-cutting themes

Return JSON:
{{
  "primaryLayout": "radial" | "tree" | "organic" | "timeline",
  "reasoning": "Why this layout works best",
  "layoutRules": {{
    "headlinePlacement": "circular" | "horizontal" | "vertical" | "chronological",
    "sectionArrangement": "hierarchical" | "radial" | "grouped",
    "detailsDisplay": "nested" | "satellite" | "expandable",
    "connectionStyle": "direct" | "curved" | "minimal",
    "emphasis": ["hierarchy", "connections", "chronology", "themes"]
  }}
}}"""
    structure = {
        "headlines": len(section_counts),
        "sections": list(section_counts),
        "estimatedConnections": True,
    }
    return [
        {"role": "system", "content": system_message},
        {
            "role": "user",
            "content": f"Determine layout for this structure: {json.dumps(structure)}",
        },
    ]
