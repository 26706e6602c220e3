"""Canvas graph persistence: loading and saving nodes and edges.

A save replaces the stored graph of one canvas with the editor's current
graph. Rows whose ids are absent from the payload are deleted, everything
else is upserted. Edge handles (``source_handle``/``target_handle``) and edge
``data`` are written and read back, so connections keep their anchor points
and flow settings across reloads.
"""

from dataclasses import dataclass, field
from typing import List

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from mindgrid.database.connection import get_db_connection
from mindgrid.database.rows import to_plain
from mindgrid.exceptions.errors import ConfigurationError, NotFoundError
from mindgrid.utils.debug import print__canvas_debug

NODE_TYPE_CONSTRAINT = "nodes_type_check"
CHECK_VIOLATION_SQLSTATE = "23514"

# ==============================================================================
# SQL
# ==============================================================================
SELECT_OWNED_CANVAS_SQL = "SELECT * FROM canvases WHERE id = %s AND user_id = %s"
SELECT_PUBLIC_CANVAS_SQL = "SELECT * FROM canvases WHERE id = %s AND is_public = true"

SELECT_NODES_SQL = """
SELECT id::text AS id, type, position, data, style
FROM nodes
WHERE canvas_id = %s
ORDER BY created_at, id
"""

SELECT_EDGES_SQL = """
SELECT id::text AS id, source::text AS source, target::text AS target,
       source_handle, target_handle, type, label, style, data
FROM edges
WHERE canvas_id = %s
ORDER BY created_at, id
"""

SELECT_NODE_IDS_SQL = "SELECT id::text FROM nodes WHERE canvas_id = %s"
SELECT_EDGE_IDS_SQL = "SELECT id::text FROM edges WHERE canvas_id = %s"

# Deletes are always scoped to the canvas being saved
DELETE_EDGES_SQL = "DELETE FROM edges WHERE canvas_id = %s AND id::text = ANY(%s)"
DELETE_NODES_SQL = "DELETE FROM nodes WHERE canvas_id = %s AND id::text = ANY(%s)"

UPSERT_NODE_SQL = """
INSERT INTO nodes (id, canvas_id, type, position, data, style)
VALUES (%s, %s, %s, %s, %s, %s)
ON CONFLICT (id) DO UPDATE SET
    type = EXCLUDED.type,
    position = EXCLUDED.position,
    data = EXCLUDED.data,
    style = EXCLUDED.style,
    updated_at = NOW()
WHERE nodes.canvas_id = EXCLUDED.canvas_id
"""

UPSERT_EDGE_SQL = """
INSERT INTO edges (id, canvas_id, source, target, source_handle, target_handle,
                   type, label, style, data)
VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
ON CONFLICT (id) DO UPDATE SET
    source = EXCLUDED.source,
    target = EXCLUDED.target,
    source_handle = EXCLUDED.source_handle,
    target_handle = EXCLUDED.target_handle,
    type = EXCLUDED.type,
    label = EXCLUDED.label,
    style = EXCLUDED.style,
    data = EXCLUDED.data
WHERE edges.canvas_id = EXCLUDED.canvas_id
"""

TOUCH_CANVAS_SQL = "UPDATE canvases SET updated_at = NOW() WHERE id = %s"

INSERT_NODE_SQL = """
INSERT INTO nodes (id, canvas_id, type, position, data, style)
VALUES (%s, %s, %s, %s, %s, %s)
"""

INSERT_EDGE_SQL = """
INSERT INTO edges (id, canvas_id, source, target, source_handle, target_handle,
                   type, label, style, data)
VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
"""


# ==============================================================================
# ROW <-> EDITOR SHAPES
# ==============================================================================
# Layout fields without a column of their own: sizes live in ``style``, the
# group relation and stacking order in ``data``.
NODE_SIZE_KEYS = ("width", "height")
NODE_LAYOUT_DATA_KEYS = ("parentNode", "extent", "zIndex")


def node_row_to_flow(row, canvas_id: str):
    """Shape a ``nodes`` row for the canvas editor.

    Synapse nodes carry the id of the canvas they sit on in ``data.canvasId``.
    Layout fields stored in ``data`` are lifted back onto the node.
    """
    data = dict(row.get("data") or {})
    layout = {key: data.pop(key) for key in NODE_LAYOUT_DATA_KEYS if key in data}
    if row.get("type") == "synapse":
        data["canvasId"] = canvas_id
    shaped = {
        "id": str(row["id"]),
        "type": row.get("type"),
        "position": row.get("position") or {"x": 0, "y": 0},
        "data": data,
        "style": row.get("style") or {},
    }
    shaped.update(layout)
    return shaped


def edge_row_to_flow(row):
    return {
        "id": str(row["id"]),
        "source": str(row["source"]),
        "target": str(row["target"]),
        "sourceHandle": row.get("source_handle"),
        "targetHandle": row.get("target_handle"),
        "type": row.get("type") or "default",
        "label": row.get("label"),
        "style": row.get("style") or {},
        "data": row.get("data") or {},
    }


def node_params(node, canvas_id: str):
    data = dict(node.data or {})
    style = dict(node.style or {})
    for key, value in zip(NODE_SIZE_KEYS, (node.width, node.height)):
        if value is not None:
            style.setdefault(key, value)
    for key, value in zip(NODE_LAYOUT_DATA_KEYS, (node.parent_node, node.extent, node.z_index)):
        if value is not None:
            data[key] = value
    return (
        node.id,
        canvas_id,
        node.type,
        Jsonb(node.position),
        Jsonb(data),
        Jsonb(style),
    )


def edge_params(edge, canvas_id: str):
    return (
        edge.id,
        canvas_id,
        edge.source,
        edge.target,
        edge.source_handle,
        edge.target_handle,
        edge.type or "default",
        edge.label,
        Jsonb(edge.style or {}),
        Jsonb(edge.data or {}),
    )


# ==============================================================================
# SAVE PLANNING
# ==============================================================================
@dataclass
class GraphSavePlan:
    node_ids_to_delete: List[str] = field(default_factory=list)
    edge_ids_to_delete: List[str] = field(default_factory=list)


def plan_graph_save(existing_node_ids, existing_edge_ids, nodes, edges) -> GraphSavePlan:
    """Work out which stored rows disappear with this save.

    Order of the stored ids is kept so the delete statements are deterministic.
    """
    current_node_ids = {node.id for node in nodes}
    current_edge_ids = {edge.id for edge in edges}
    return GraphSavePlan(
        node_ids_to_delete=[i for i in existing_node_ids if i not in current_node_ids],
        edge_ids_to_delete=[i for i in existing_edge_ids if i not in current_edge_ids],
    )


def is_node_type_violation(exc: psycopg.Error) -> bool:
    if getattr(exc, "sqlstate", None) != CHECK_VIOLATION_SQLSTATE:
        return False
    diag = getattr(exc, "diag", None)
    constraint = getattr(diag, "constraint_name", None) if diag else None
    return constraint == NODE_TYPE_CONSTRAINT or NODE_TYPE_CONSTRAINT in str(exc)


def node_type_error(exc: psycopg.Error) -> ConfigurationError:
    print__canvas_debug(f"❌ Node type rejected by {NODE_TYPE_CONSTRAINT}: {exc}")
    return ConfigurationError(
        "Node type not allowed by the nodes_type_check constraint. "
        "Run mindgrid-add-synapse-type to update the database."
    )


# ==============================================================================
# LOAD / SAVE
# ==============================================================================
async def fetch_graph(cur, canvas_id: str):
    """Return ``(nodes, edges)`` of one canvas in editor shape."""
    await cur.execute(SELECT_NODES_SQL, (canvas_id,))
    node_rows = await cur.fetchall()
    await cur.execute(SELECT_EDGES_SQL, (canvas_id,))
    edge_rows = await cur.fetchall()
    nodes = [node_row_to_flow(row, canvas_id) for row in node_rows]
    edges = [edge_row_to_flow(row) for row in edge_rows]
    return nodes, edges


async def insert_graph(cur, canvas_id: str, nodes, edges):
    """Write the graph of a canvas created in the caller's transaction.

    Plain inserts: an id already used elsewhere fails the whole transaction.
    """
    if nodes:
        await cur.executemany(INSERT_NODE_SQL, [node_params(n, canvas_id) for n in nodes])
    if edges:
        await cur.executemany(INSERT_EDGE_SQL, [edge_params(e, canvas_id) for e in edges])


async def load_canvas(user_id: str, canvas_id: str):
    """Load an owned canvas with its nodes and edges.

    Raises:
        NotFoundError: canvas missing or owned by someone else.
    """
    async with get_db_connection() as conn:
        async with conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(SELECT_OWNED_CANVAS_SQL, (canvas_id, user_id))
            canvas = await cur.fetchone()
            if not canvas:
                raise NotFoundError("Canvas not found")
            nodes, edges = await fetch_graph(cur, canvas_id)

    print__canvas_debug(
        f"📥 Loaded canvas {canvas_id}: {len(nodes)} nodes, {len(edges)} edges"
    )
    return {"canvas": to_plain(canvas), "nodes": nodes, "edges": edges}


async def load_public_canvas(canvas_id: str):
    """Load a canvas shared with ``is_public``, for anonymous read-only viewing.

    Raises:
        NotFoundError: canvas missing or not public.
    """
    async with get_db_connection() as conn:
        async with conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(SELECT_PUBLIC_CANVAS_SQL, (canvas_id,))
            canvas = await cur.fetchone()
            if not canvas:
                raise NotFoundError("Canvas not found")
            nodes, edges = await fetch_graph(cur, canvas_id)

    print__canvas_debug(f"🌐 Loaded shared canvas {canvas_id}: {len(nodes)} nodes")
    return {"canvas": to_plain(canvas), "nodes": nodes, "edges": edges}


async def save_graph(user_id: str, canvas_id: str, nodes, edges):
    """Persist the editor graph of an owned canvas.

    Steps: delete stored edges and nodes missing from the payload, upsert
    nodes, upsert edges, touch ``canvases.updated_at``. All of it runs on one
    connection and commits together.

    Raises:
        NotFoundError: canvas missing or not owned by the caller.
        ConfigurationError: a node type is rejected by ``nodes_type_check``.
    """
    print__canvas_debug(
        f"💾 Saving canvas {canvas_id}: {len(nodes)} nodes, {len(edges)} edges"
    )
    try:
        async with get_db_connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    "SELECT id FROM canvases WHERE id = %s AND user_id = %s",
                    (canvas_id, user_id),
                )
                if not await cur.fetchone():
                    raise NotFoundError("Canvas not found")

                await cur.execute(SELECT_NODE_IDS_SQL, (canvas_id,))
                existing_node_ids = [row[0] for row in await cur.fetchall()]
                await cur.execute(SELECT_EDGE_IDS_SQL, (canvas_id,))
                existing_edge_ids = [row[0] for row in await cur.fetchall()]

                plan = plan_graph_save(existing_node_ids, existing_edge_ids, nodes, edges)

                edges_deleted = 0
                if plan.edge_ids_to_delete:
                    await cur.execute(
                        DELETE_EDGES_SQL, (canvas_id, plan.edge_ids_to_delete)
                    )
                    edges_deleted = max(cur.rowcount, 0)

                nodes_deleted = 0
                if plan.node_ids_to_delete:
                    await cur.execute(
                        DELETE_NODES_SQL, (canvas_id, plan.node_ids_to_delete)
                    )
                    nodes_deleted = max(cur.rowcount, 0)

                # rowcount excludes ids the canvas guard skipped
                nodes_saved = 0
                if nodes:
                    await cur.executemany(
                        UPSERT_NODE_SQL, [node_params(n, canvas_id) for n in nodes]
                    )
                    nodes_saved = max(cur.rowcount, 0)
                edges_saved = 0
                if edges:
                    await cur.executemany(
                        UPSERT_EDGE_SQL, [edge_params(e, canvas_id) for e in edges]
                    )
                    edges_saved = max(cur.rowcount, 0)

                await cur.execute(TOUCH_CANVAS_SQL, (canvas_id,))

    except psycopg.Error as exc:
        if is_node_type_violation(exc):
            raise node_type_error(exc) from exc
        raise

    skipped = (len(nodes) - nodes_saved) + (len(edges) - edges_saved)
    if skipped:
        print__canvas_debug(f"⚠️ {skipped} row(s) skipped: ids already used by another canvas")
    print__canvas_debug(
        f"✅ Canvas {canvas_id} saved (deleted {nodes_deleted} nodes, {edges_deleted} edges)"
    )
    return {
        "canvas_id": canvas_id,
        "nodes_saved": nodes_saved,
        "edges_saved": edges_saved,
        "nodes_deleted": nodes_deleted,
        "edges_deleted": edges_deleted,
    }
