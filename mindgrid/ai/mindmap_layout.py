"""Layout of an analyzed conversation as a mind map graph.

The central theme sits at the origin, headlines are placed around it, and
each headline's sections are placed below it with their details attached.
Key points and action items are grouped inside group nodes (children use
positions relative to their group). Insights, themes and global actions go
into fixed zones around the map. A pass then pushes overlapping top-level
nodes apart, and the whole map is centered on the origin.
"""

import math
import uuid
from datetime import datetime, timezone

NODE_STYLES = {
    "central": {"type": "headline", "width": 450, "height": 120, "fontSize": 40, "color": "#4F46E5", "zIndex": 1000},
    "headline": {"type": "headline", "width": 350, "height": 90, "fontSize": 28, "color": "#7C3AED", "zIndex": 900},
    "section": {"type": "headline", "width": 280, "height": 70, "fontSize": 20, "color": "#EC4899", "zIndex": 800},
    "keyPoint": {"type": "sticky", "width": 240, "height": 90, "color": "#FEF3C7", "zIndex": 700},
    "example": {
        "type": "text",
        "width": 200,
        "height": 70,
        "fontSize": 14,
        "color": "#10B981",
        "style": {"backgroundColor": "#F0FDF4", "padding": "8px", "borderRadius": "6px"},
        "zIndex": 600,
    },
    "data": {
        "type": "text",
        "width": 180,
        "height": 60,
        "fontSize": 14,
        "color": "#3B82F6",
        "style": {"backgroundColor": "#EFF6FF", "padding": "8px", "borderRadius": "6px"},
        "zIndex": 600,
    },
    "quote": {
        "type": "sticky",
        "width": 280,
        "height": 100,
        "color": "#E9D5FF",
        "style": {"fontStyle": "italic"},
        "zIndex": 600,
    },
    "actionItem": {"type": "sticky", "width": 250, "height": 80, "color": "#FEE2E2", "zIndex": 600},
    "insight": {"type": "sticky", "width": 300, "height": 100, "color": "#D1FAE5", "zIndex": 850},
}

THEME_Z_INDEX = 50
GROUP_Z_INDEX = 100
HEADLINE_RADIUS = 600
SECTION_DISTANCE = 350

CROSS_CUTTING_ZONES = {
    "insights": (-800, -600),
    "themes": (800, -600),
    "globalActions": (0, 800),
}
PRIORITY_MARKERS = {"high": "🔴", "medium": "🟡"}
DEFAULT_PRIORITY_MARKER = "🟢"

# Overlap pass
MIN_NODE_GAP = 100
OVERLAP_ITERATIONS = 8
DEFAULT_NODE_WIDTH = 200
DEFAULT_NODE_HEIGHT = 100


def _as_list(value):
    return value if isinstance(value, list) else []


def _item_text(item, key):
    """Text of a provider item that may be a plain string or an object."""
    if isinstance(item, dict):
        return str(item.get(key) or "")
    return str(item)


# ==============================================================================
# POSITIONS
# ==============================================================================
def main_positions(count: int, placement: str, radius: float = HEADLINE_RADIUS):
    """Headline positions around the central node."""
    if placement == "horizontal":
        spacing = 700
        start_x = -(count - 1) * spacing / 2
        return [(start_x + i * spacing, 0) for i in range(count)]
    if placement == "vertical":
        spacing = 500
        start_y = -(count - 1) * spacing / 2
        return [(0, start_y + i * spacing) for i in range(count)]
    if placement == "chronological":
        return [(-300 + i * 600, 100) for i in range(count)]
    # circular, starting at the top
    return [
        (
            math.cos(i / count * 2 * math.pi - math.pi / 2) * radius,
            math.sin(i / count * 2 * math.pi - math.pi / 2) * radius,
        )
        for i in range(count)
    ]


def sub_positions(count: int, parent, arrangement: str, distance: float = SECTION_DISTANCE):
    """Section positions relative to their headline."""
    parent_x, parent_y = parent
    if arrangement == "radial":
        start_angle, end_angle = -math.pi, 0
        step = (end_angle - start_angle) / ((count - 1) or 1)
        return [
            (
                parent_x + math.cos(start_angle + i * step) * distance,
                parent_y + math.sin(start_angle + i * step) * distance,
            )
            for i in range(count)
        ]
    if arrangement == "grouped":
        cols = math.ceil(math.sqrt(count))
        spacing = 300
        return [
            (
                parent_x + (i % cols - (cols - 1) / 2) * spacing,
                parent_y + 200 + (i // cols) * 200,
            )
            for i in range(count)
        ]
    # hierarchical: one row below the parent
    spacing = max(280, 250 + (5 - count) * 30)
    start_x = parent_x - (count - 1) * spacing / 2
    return [(start_x + i * spacing, parent_y + 200) for i in range(count)]


# ==============================================================================
# LAYOUT ENGINE
# ==============================================================================
class MindMapLayout:
    """Builds ``(nodes, edges)`` in canvas editor shape from an analysis.

    ``id_factory`` produces node and edge ids; random UUIDs by default.
    """

    def __init__(self, id_factory=None):
        self.new_id = id_factory or (lambda: str(uuid.uuid4()))
        self.nodes = []
        self.edges = []

    def generate(self, analysis):
        metadata = analysis.get("metadata") or {}
        structure = analysis.get("structure") or {}
        rules = (analysis.get("layout") or {}).get("layoutRules") or {}

        central_id = self._add_styled_node(
            "central", metadata.get("centralTheme") or metadata.get("title") or "", (0, 0)
        )
        headlines = [h for h in _as_list(structure.get("headlines")) if isinstance(h, dict)]
        self._layout_headlines(headlines, central_id, rules)
        self._add_cross_cutting(structure.get("crossCutting"), central_id)

        self._spread_overlaps()
        self._center()
        return self.nodes, self.edges

    # ------------------------------------------------------------------
    # node and edge builders
    # ------------------------------------------------------------------
    def _add_styled_node(self, kind, text, position, parent_id=None):
        config = NODE_STYLES[kind]
        data = {"text": text, "color": config.get("color") or "#000000"}
        if "fontSize" in config:
            data["fontSize"] = config["fontSize"]
        node = {
            "id": self.new_id(),
            "type": config["type"],
            "position": {"x": position[0], "y": position[1]},
            "data": data,
            "width": config["width"],
            "height": config["height"],
            "zIndex": config["zIndex"],
        }
        if "style" in config:
            node["style"] = dict(config["style"])
        if parent_id:
            node["parentNode"] = parent_id
            node["extent"] = "parent"
        self.nodes.append(node)
        return node["id"]

    def _add_group(self, label, position, width, height, color="#F3F4F6", style=None, z_index=GROUP_Z_INDEX):
        node = {
            "id": self.new_id(),
            "type": "group",
            "position": {"x": position[0], "y": position[1]},
            "data": {"label": label, "color": color},
            "style": {"width": width, "height": height, **(style or {})},
            "zIndex": z_index,
        }
        self.nodes.append(node)
        return node["id"]

    def _connect(self, source, target, color, width, dash=None):
        style = {"stroke": color, "strokeWidth": width}
        if dash:
            style["strokeDasharray"] = dash
        self.edges.append(
            {"id": self.new_id(), "source": source, "target": target, "type": "default", "style": style}
        )

    # ------------------------------------------------------------------
    # hierarchy
    # ------------------------------------------------------------------
    def _layout_headlines(self, headlines, central_id, rules):
        positions = main_positions(len(headlines), rules.get("headlinePlacement") or "circular")
        for headline, position in zip(headlines, positions):
            headline_id = self._add_styled_node("headline", headline.get("title") or "", position)
            self._connect(central_id, headline_id, NODE_STYLES["headline"]["color"], 3)
            sections = [s for s in _as_list(headline.get("sections")) if isinstance(s, dict)]
            self._layout_sections(sections, headline_id, position, rules)

    def _layout_sections(self, sections, headline_id, headline_position, rules):
        if not sections:
            return
        positions = sub_positions(
            len(sections), headline_position, rules.get("sectionArrangement") or "hierarchical"
        )
        for section, position in zip(sections, positions):
            section_id = self._add_styled_node("section", section.get("title") or "", position)
            self._connect(headline_id, section_id, NODE_STYLES["section"]["color"], 2)
            self._layout_details(section.get("details") or {}, section_id, position)

    def _layout_details(self, details, section_id, section_position):
        x, y = section_position
        current_y = y + 120

        key_points = _as_list(details.get("keyPoints"))
        if key_points:
            group_id = self._add_group("Key Points", (x - 150, current_y), 300, 150)
            for idx, point in enumerate(key_points):
                self._add_styled_node("keyPoint", _item_text(point, "text"), (20, 60 + idx * 100), group_id)
            self._connect(section_id, group_id, "#F59E0B", 1)
            current_y += 100 + len(key_points) * 100

        for idx, example in enumerate(_as_list(details.get("examples"))):
            example_id = self._add_styled_node(
                "example", f"Example: {_item_text(example, 'text')}", (x + 300, y + idx * 80)
            )
            self._connect(section_id, example_id, "#10B981", 1, "3,3")

        for idx, data_point in enumerate(_as_list(details.get("data"))):
            data_id = self._add_styled_node(
                "data", _item_text(data_point, "text"), (x + 150, current_y + idx * 70)
            )
            self._connect(section_id, data_id, "#3B82F6", 1, "2,2")

        for idx, quote in enumerate(_as_list(details.get("quotes"))):
            if isinstance(quote, dict):
                text = f'"{quote.get("text") or ""}"\n\u2014 {quote.get("speaker") or "Unknown"}'
            else:
                text = f'"{quote}"'
            quote_id = self._add_styled_node("quote", text, (x - 350, y + 150 + idx * 120))
            self._connect(section_id, quote_id, "#8B5CF6", 1, "5,5")

        action_items = _as_list(details.get("actionItems"))
        if action_items:
            group_id = self._add_group("Actions", (x, current_y + 100), 300, 150)
            for idx, action in enumerate(action_items):
                self._add_styled_node("actionItem", _item_text(action, "action"), (20, 60 + idx * 90), group_id)
            self._connect(section_id, group_id, "#EF4444", 1)

    # ------------------------------------------------------------------
    # cross-cutting zones
    # ------------------------------------------------------------------
    def _add_cross_cutting(self, cross_cutting, central_id):
        if not isinstance(cross_cutting, dict):
            return

        insights = _as_list(cross_cutting.get("insights"))
        if insights:
            group_id = self._add_group(
                "💡 Key Insights", CROSS_CUTTING_ZONES["insights"], 400, 120 + len(insights) * 120
            )
            for idx, insight in enumerate(insights):
                self._add_styled_node("insight", _item_text(insight, "text"), (20, 80 + idx * 120), group_id)
            self._connect(central_id, group_id, "#10B981", 2, "10,5")

        zone_x, zone_y = CROSS_CUTTING_ZONES["themes"]
        for idx, theme in enumerate(_as_list(cross_cutting.get("themes"))):
            theme_id = self._add_group(
                _item_text(theme, "name"),
                (zone_x, zone_y + idx * 250),
                350,
                150,
                color="#FEF3C7",
                style={"backgroundColor": "#FEF9C3", "border": "2px solid #F59E0B"},
                z_index=THEME_Z_INDEX,
            )
            description = theme.get("description") if isinstance(theme, dict) else ""
            self.nodes.append(
                {
                    "id": self.new_id(),
                    "type": "text",
                    "position": {"x": 20, "y": 60},
                    "parentNode": theme_id,
                    "extent": "parent",
                    "data": {"text": description or "", "fontSize": 12, "color": "#92400E"},
                    "width": 310,
                    "height": 70,
                }
            )
            self._connect(central_id, theme_id, "#F59E0B", 2, "8,4")

        actions = _as_list(cross_cutting.get("globalActions"))
        if actions:
            group_id = self._add_group(
                "🎯 Global Action Items", CROSS_CUTTING_ZONES["globalActions"], 400, 120 + len(actions) * 120
            )
            for idx, action in enumerate(actions):
                if isinstance(action, dict):
                    marker = PRIORITY_MARKERS.get(action.get("priority"), DEFAULT_PRIORITY_MARKER)
                    text = f"{marker} {action.get('action') or ''}\n{action.get('context') or ''}"
                else:
                    text = f"{DEFAULT_PRIORITY_MARKER} {action}\n"
                self._add_styled_node("actionItem", text, (20, 80 + idx * 100), group_id)
            self._connect(central_id, group_id, "#EF4444", 2)

    # ------------------------------------------------------------------
    # finishing passes (top-level nodes only; children are group-relative)
    # ------------------------------------------------------------------
    def _top_level(self):
        return [node for node in self.nodes if not node.get("parentNode")]

    def _spread_overlaps(self):
        top_level = self._top_level()
        for _ in range(OVERLAP_ITERATIONS):
            for i, first in enumerate(top_level):
                for second in top_level[i + 1:]:
                    dx = second["position"]["x"] - first["position"]["x"]
                    dy = second["position"]["y"] - first["position"]["y"]
                    distance = math.hypot(dx, dy)
                    required = (
                        (first.get("width") or DEFAULT_NODE_WIDTH)
                        + (second.get("width") or DEFAULT_NODE_WIDTH)
                    ) / 2 + MIN_NODE_GAP
                    if 0 < distance < required:
                        push = (required - distance) / 2
                        push_x = dx / distance * push
                        push_y = dy / distance * push
                        first["position"]["x"] -= push_x
                        first["position"]["y"] -= push_y
                        second["position"]["x"] += push_x
                        second["position"]["y"] += push_y

    def _center(self):
        top_level = self._top_level()
        if not top_level:
            return
        min_x = min(n["position"]["x"] - (n.get("width") or DEFAULT_NODE_WIDTH) / 2 for n in top_level)
        max_x = max(n["position"]["x"] + (n.get("width") or DEFAULT_NODE_WIDTH) / 2 for n in top_level)
        min_y = min(n["position"]["y"] - (n.get("height") or DEFAULT_NODE_HEIGHT) / 2 for n in top_level)
        max_y = max(n["position"]["y"] + (n.get("height") or DEFAULT_NODE_HEIGHT) / 2 for n in top_level)
        center_x = (min_x + max_x) / 2
        center_y = (min_y + max_y) / 2
        for node in top_level:
            node["position"]["x"] -= center_x
            node["position"]["y"] -= center_y


def generate_mind_map(analysis, id_factory=None):
    """Lay out an analysis and describe the result.

    Returns:
        dict: ``nodes``, ``edges`` and a ``metadata`` summary.
    """
    nodes, edges = MindMapLayout(id_factory=id_factory).generate(analysis)
    metadata = analysis.get("metadata") or {}
    structure = analysis.get("structure") or {}
    headlines = [h for h in _as_list(structure.get("headlines")) if isinstance(h, dict)]
    return {
        "nodes": nodes,
        "edges": edges,
        "metadata": {
            "totalNodes": len(nodes),
            "totalEdges": len(edges),
            "generatedAt": datetime.now(timezone.utc).isoformat(),
            "layoutStrategy": (analysis.get("layout") or {}).get("primaryLayout") or "hierarchical",
            "analysisStages": metadata.get("analysisStages") or 5,
            "structure": {
                "headlines": len(headlines),
                "sections": sum(len(_as_list(h.get("sections"))) for h in headlines),
                "totalPoints": (metadata.get("extractedElements") or {}).get("totalPoints") or 0,
            },
        },
    }
