"""
Test for Phase 8: Mind Map Generation
Staged content analysis, the layout engine and the /api/ai/analyze-content
and /api/ai/generate-mindmap endpoints.
"""

import json
import sys
import asyncio

# CRITICAL: Set Windows event loop policy FIRST, before other imports
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(BASE_DIR))

import itertools
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from mindgrid.ai.content_analysis import CONSOLE_LOG_MESSAGE, analyze_content, looks_like_console_log
from mindgrid.ai.mindmap_layout import MindMapLayout, generate_mind_map, main_positions, sub_positions
from mindgrid.ai.prompts import CROSS_CUTTING_SYSTEM_MESSAGE, HEADLINES_SYSTEM_MESSAGE
from mindgrid.config.settings import OPENAI_ANALYSIS_MODEL
from mindgrid.dependencies.auth import get_current_user
from mindgrid.exceptions.errors import ContractViolationError, MissingApiKeyError, UpstreamProviderError
from mindgrid.main import app
from tests.helpers import make_user_claims

API_KEY = "sk-test-key"
CONVERSATION = "Alice: we need to plan the budget.\nBob: and hire two engineers."


@pytest.fixture
def client():
    app.dependency_overrides[get_current_user] = lambda: make_user_claims()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(monkeypatch):
    monkeypatch.setenv("USE_TEST_TOKENS", "0")
    app.dependency_overrides.clear()
    return TestClient(app)


def counting_ids():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


# ==============================================================================
# STAGED ANALYSIS
# ==============================================================================
SECTIONS_BY_HEADLINE = {
    "Budget": [{"id": "s1", "title": "Costs"}, {"id": "s2", "title": "Revenue"}],
    "Hiring": [{"id": "s3", "title": "Roles"}],
}


def provider_answer(api_key, **kwargs):
    """Answers keyed on the system prompt of each stage."""
    system = kwargs["messages"][0]["content"]
    if system == HEADLINES_SYSTEM_MESSAGE:
        answer = {
            "centralTheme": "Team planning",
            "headlines": [{"id": "h1", "title": "Budget"}, {"id": "h2", "title": "Hiring"}],
        }
    elif system.startswith("You are analyzing the section"):
        title = system.split('"')[1]
        answer = {"sections": SECTIONS_BY_HEADLINE[title]}
    elif system.startswith("You are extracting detailed information"):
        section_title = system.split('"')[1]
        answer = {"details": {"keyPoints": [f"{section_title} point"], "examples": []}}
    elif system == CROSS_CUTTING_SYSTEM_MESSAGE:
        answer = {"insights": [{"text": "Money drives hiring"}]}
    else:
        answer = {"primaryLayout": "radial", "layoutRules": {"headlinePlacement": "horizontal"}}
    return json.dumps(answer), None


@pytest.mark.asyncio
async def test_analyze_content_runs_five_stages():
    completion = AsyncMock(side_effect=provider_answer)
    shared_client = object()
    with patch("mindgrid.ai.content_analysis.chat_completion", new=completion):
        analysis = await analyze_content(API_KEY, CONVERSATION, title="Offsite", client=shared_client)

    # 1 headlines + 2 section calls + 3 detail calls + cross-cutting + layout
    assert completion.await_count == 8
    for call in completion.call_args_list:
        assert call.kwargs["model"] == OPENAI_ANALYSIS_MODEL
        assert call.kwargs["json_mode"] is True
        assert call.kwargs["client"] is shared_client

    headlines = analysis["structure"]["headlines"]
    assert [h["title"] for h in headlines] == ["Budget", "Hiring"]
    assert [s["title"] for s in headlines[0]["sections"]] == ["Costs", "Revenue"]
    assert headlines[0]["sections"][1]["details"]["keyPoints"] == ["Revenue point"]
    assert headlines[1]["sections"][0]["details"]["keyPoints"] == ["Roles point"]
    assert analysis["structure"]["crossCutting"] == {"insights": [{"text": "Money drives hiring"}]}
    assert analysis["layout"]["primaryLayout"] == "radial"

    metadata = analysis["metadata"]
    assert metadata["title"] == "Offsite"
    assert metadata["centralTheme"] == "Team planning"
    assert metadata["contentLength"] == len(CONVERSATION)
    assert metadata["analysisStages"] == 5
    assert metadata["extractedElements"] == {"headlines": 2, "sections": 3, "totalPoints": 3}


@pytest.mark.asyncio
async def test_analyze_content_without_headlines():
    def answer(api_key, **kwargs):
        if kwargs["messages"][0]["content"] == HEADLINES_SYSTEM_MESSAGE:
            return json.dumps({"headlines": "not a list"}), None
        return "", None

    completion = AsyncMock(side_effect=answer)
    with patch("mindgrid.ai.content_analysis.chat_completion", new=completion):
        analysis = await analyze_content(API_KEY, CONVERSATION, client=object())

    assert completion.await_count == 3
    assert analysis["structure"] == {"headlines": [], "crossCutting": {}}
    assert analysis["layout"] == {}
    assert analysis["metadata"]["title"] == "Untitled Analysis"


@pytest.mark.asyncio
async def test_analyze_content_rejects_non_object_answer():
    completion = AsyncMock(return_value=("[1, 2]", None))
    with patch("mindgrid.ai.content_analysis.chat_completion", new=completion):
        with pytest.raises(ContractViolationError) as exc_info:
            await analyze_content(API_KEY, CONVERSATION, client=object())
    assert exc_info.value.message == "Failed to analyze content"


CONSOLE_LOG_CASES = [
    ("Failed to load resource: the server responded with 404", True),
    ("console.error('boom')", True),
    ("at react-dom.development.js:4012", True),
    ("npm ERR! code ELIFECYCLE", True),
    ("Saving nodes: Array(12)", True),
    ("error\nfailed\nexception", True),
    (CONVERSATION, False),
    ("We talked about what failed last quarter.\nThen we planned.\nThen lunch.\nThen more.", False),
]


@pytest.mark.parametrize("content,expected", CONSOLE_LOG_CASES)
def test_looks_like_console_log(content, expected):
    assert looks_like_console_log(content) is expected


# ==============================================================================
# LAYOUT ENGINE
# ==============================================================================
def test_main_positions():
    top = main_positions(4, "circular")[0]
    assert top[0] == pytest.approx(0)
    assert top[1] == pytest.approx(-600)
    assert main_positions(3, "horizontal") == [(-700, 0), (0, 0), (700, 0)]
    assert main_positions(2, "vertical") == [(0, -250), (0, 250)]
    assert main_positions(2, "chronological") == [(-300, 100), (300, 100)]


def test_sub_positions():
    # two sections: spacing max(280, 250 + 3 * 30) = 340
    assert sub_positions(2, (100, 0), "hierarchical") == [(-70, 200), (270, 200)]
    grouped = sub_positions(4, (0, 0), "grouped")
    assert grouped == [(-150, 200), (150, 200), (-150, 400), (150, 400)]
    radial = sub_positions(1, (0, 0), "radial")
    assert radial[0][0] == pytest.approx(-350)


ANALYSIS = {
    "metadata": {"centralTheme": "Team planning", "extractedElements": {"totalPoints": 2}},
    "structure": {
        "headlines": [
            {
                "title": "Budget",
                "sections": [
                    {
                        "title": "Costs",
                        "details": {
                            "keyPoints": ["Cut travel", "Renegotiate rent"],
                            "examples": ["Q3 flights"],
                            "quotes": [{"text": "Spend less", "speaker": "Alice"}],
                            "actionItems": ["Draft budget"],
                        },
                    }
                ],
            },
            {"title": "Hiring", "sections": []},
        ],
        "crossCutting": {
            "insights": [{"text": "Money drives hiring"}],
            "themes": [{"name": "Growth", "description": "Appears everywhere"}],
            "globalActions": [
                {"action": "Book offsite", "priority": "high", "context": "Before May"},
                {"action": "Send notes", "priority": "low", "context": ""},
            ],
        },
    },
    "layout": {"primaryLayout": "tree", "layoutRules": {"headlinePlacement": "horizontal"}},
}


def nodes_by_text(nodes):
    return {node["data"].get("text") or node["data"].get("label"): node for node in nodes}


def test_layout_builds_hierarchy():
    nodes, edges = MindMapLayout(id_factory=counting_ids()).generate(ANALYSIS)
    by_text = nodes_by_text(nodes)

    central = nodes[0]
    assert central["data"] == {"text": "Team planning", "color": "#4F46E5", "fontSize": 40}
    assert central["zIndex"] == 1000
    assert by_text["Budget"]["type"] == "headline"
    assert by_text["Costs"]["data"]["fontSize"] == 20

    key_points = by_text["Key Points"]
    assert key_points["type"] == "group"
    assert key_points["style"] == {"width": 300, "height": 150}
    cut_travel = by_text["Cut travel"]
    assert cut_travel["parentNode"] == key_points["id"]
    assert cut_travel["extent"] == "parent"
    assert cut_travel["position"] == {"x": 20, "y": 60}
    assert by_text["Renegotiate rent"]["position"] == {"x": 20, "y": 160}

    assert by_text["Example: Q3 flights"]["style"]["backgroundColor"] == "#F0FDF4"
    assert '"Spend less"\n\u2014 Alice' in by_text
    assert by_text["Draft budget"]["parentNode"] == by_text["Actions"]["id"]

    edge_pairs = {(e["source"], e["target"]): e for e in edges}
    assert (central["id"], by_text["Budget"]["id"]) in edge_pairs
    example_edge = edge_pairs[(by_text["Costs"]["id"], by_text["Example: Q3 flights"]["id"])]
    assert example_edge["style"] == {"stroke": "#10B981", "strokeWidth": 1, "strokeDasharray": "3,3"}
    assert all(e["type"] == "default" for e in edges)


def test_layout_cross_cutting_zones():
    nodes, edges = MindMapLayout(id_factory=counting_ids()).generate(ANALYSIS)
    by_text = nodes_by_text(nodes)

    insights = by_text["💡 Key Insights"]
    assert insights["style"] == {"width": 400, "height": 240}
    assert by_text["Money drives hiring"]["position"] == {"x": 20, "y": 80}

    theme = by_text["Growth"]
    assert theme["zIndex"] == 50
    assert theme["style"]["border"] == "2px solid #F59E0B"
    description = by_text["Appears everywhere"]
    assert description["parentNode"] == theme["id"]
    assert description["data"]["color"] == "#92400E"

    assert "🔴 Book offsite\nBefore May" in by_text
    assert "🟢 Send notes\n" in by_text
    global_actions = by_text["🎯 Global Action Items"]
    assert by_text["🟢 Send notes\n"]["position"] == {"x": 20, "y": 180}
    assert any(e["target"] == global_actions["id"] and e["style"]["stroke"] == "#EF4444" for e in edges)


def test_layout_is_centered_and_children_stay_relative():
    nodes, _edges = MindMapLayout(id_factory=counting_ids()).generate(ANALYSIS)
    top_level = [n for n in nodes if not n.get("parentNode")]
    min_x = min(n["position"]["x"] - (n.get("width") or 200) / 2 for n in top_level)
    max_x = max(n["position"]["x"] + (n.get("width") or 200) / 2 for n in top_level)
    min_y = min(n["position"]["y"] - (n.get("height") or 100) / 2 for n in top_level)
    max_y = max(n["position"]["y"] + (n.get("height") or 100) / 2 for n in top_level)
    assert (min_x + max_x) / 2 == pytest.approx(0)
    assert (min_y + max_y) / 2 == pytest.approx(0)

    children = [n for n in nodes if n.get("parentNode")]
    assert children
    assert all(n["position"]["x"] == 20 for n in children)


def test_overlapping_nodes_are_pushed_apart():
    analysis = {
        "metadata": {"centralTheme": "Center"},
        "structure": {"headlines": [{"title": "A"}, {"title": "B"}]},
        "layout": {"layoutRules": {"headlinePlacement": "chronological"}},
    }
    nodes, _edges = MindMapLayout(id_factory=counting_ids()).generate(analysis)
    by_text = nodes_by_text(nodes)
    # chronological places A at (-300, 100), closer to the center than 400 + 100
    before = ((-300) ** 2 + 100 ** 2) ** 0.5
    a, center = by_text["A"]["position"], by_text["Center"]["position"]
    after = ((a["x"] - center["x"]) ** 2 + (a["y"] - center["y"]) ** 2) ** 0.5
    assert after > before


def test_generate_mind_map_metadata():
    result = generate_mind_map(ANALYSIS, id_factory=counting_ids())
    metadata = result["metadata"]
    assert metadata["totalNodes"] == len(result["nodes"])
    assert metadata["totalEdges"] == len(result["edges"])
    assert metadata["layoutStrategy"] == "tree"
    assert metadata["analysisStages"] == 5
    assert metadata["structure"] == {"headlines": 2, "sections": 1, "totalPoints": 2}
    assert len({n["id"] for n in result["nodes"]}) == len(result["nodes"])


# ==============================================================================
# ENDPOINTS
# ==============================================================================
@pytest.mark.parametrize("path", ["/api/ai/analyze-content", "/api/ai/generate-mindmap"])
def test_mindmap_endpoints_require_session(anonymous_client, path):
    response = anonymous_client.post(path, json={"content": "x", "structure": {"headlines": []}})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_analyze_content_missing_key(client):
    with patch(
        "mindgrid.routes.ai_mindmap.fetch_openai_api_key",
        new=AsyncMock(side_effect=MissingApiKeyError()),
    ):
        response = client.post("/api/ai/analyze-content", json={"content": ""})
    assert response.status_code == 400
    assert response.json() == {
        "error": "OpenAI API key not configured. Please add your API key in settings."
    }


ANALYZE_REJECTIONS = [
    {"test_id": "MAP_001", "body": {}, "error": "Content is required"},
    {"test_id": "MAP_002", "body": {"content": "   "}, "error": "Content is required"},
    {"test_id": "MAP_003", "body": {"content": "Uncaught Error: x is undefined"}, "error": CONSOLE_LOG_MESSAGE},
]


@pytest.mark.parametrize("case", ANALYZE_REJECTIONS, ids=[c["test_id"] for c in ANALYZE_REJECTIONS])
def test_analyze_content_rejections(client, case):
    analyze = AsyncMock()
    with patch("mindgrid.routes.ai_mindmap.fetch_openai_api_key", new=AsyncMock(return_value=API_KEY)), patch(
        "mindgrid.routes.ai_mindmap.analyze_content", new=analyze
    ):
        response = client.post("/api/ai/analyze-content", json=case["body"])
    assert response.status_code == 400
    assert response.json() == {"error": case["error"]}
    analyze.assert_not_called()


def test_analyze_content_success(client):
    analyze = AsyncMock(return_value={"metadata": {}, "structure": {"headlines": []}, "layout": {}})
    with patch("mindgrid.routes.ai_mindmap.fetch_openai_api_key", new=AsyncMock(return_value=API_KEY)), patch(
        "mindgrid.routes.ai_mindmap.analyze_content", new=analyze
    ):
        response = client.post("/api/ai/analyze-content", json={"content": CONVERSATION, "title": "Offsite"})
    assert response.status_code == 200
    assert response.json()["structure"] == {"headlines": []}
    assert analyze.call_args.args == (API_KEY, CONVERSATION)
    assert analyze.call_args.kwargs == {"title": "Offsite"}


def test_analyze_content_provider_status_passes_through(client):
    with patch("mindgrid.routes.ai_mindmap.fetch_openai_api_key", new=AsyncMock(return_value=API_KEY)), patch(
        "mindgrid.routes.ai_mindmap.analyze_content",
        new=AsyncMock(side_effect=UpstreamProviderError("Rate limit reached", status_code=429)),
    ):
        response = client.post("/api/ai/analyze-content", json={"content": CONVERSATION})
    assert response.status_code == 429
    assert response.json() == {"error": "Rate limit reached"}


def test_analyze_content_unexpected_failure(client, monkeypatch):
    monkeypatch.delenv("DEBUG_TRACEBACK", raising=False)
    with patch("mindgrid.routes.ai_mindmap.fetch_openai_api_key", new=AsyncMock(return_value=API_KEY)), patch(
        "mindgrid.routes.ai_mindmap.analyze_content", new=AsyncMock(side_effect=RuntimeError("boom"))
    ):
        response = client.post("/api/ai/analyze-content", json={"content": CONVERSATION})
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to analyze content"}


def test_generate_mindmap_requires_structure(client):
    response = client.post("/api/ai/generate-mindmap", json={"metadata": {"title": "x"}})
    assert response.status_code == 400
    assert response.json() == {"error": "Analysis structure is required"}


def test_generate_mindmap_needs_no_api_key(client):
    lookup = AsyncMock(side_effect=MissingApiKeyError())
    with patch("mindgrid.routes.ai_mindmap.fetch_openai_api_key", new=lookup):
        response = client.post("/api/ai/generate-mindmap", json=ANALYSIS)
    assert response.status_code == 200
    body = response.json()
    assert body["metadata"]["totalNodes"] == len(body["nodes"])
    assert body["metadata"]["layoutStrategy"] == "tree"
    lookup.assert_not_called()


def test_generate_mindmap_unexpected_failure(client, monkeypatch):
    monkeypatch.delenv("DEBUG_TRACEBACK", raising=False)
    with patch("mindgrid.routes.ai_mindmap.generate_mind_map", side_effect=RuntimeError("boom")):
        response = client.post("/api/ai/generate-mindmap", json=ANALYSIS)
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate mind map"}
