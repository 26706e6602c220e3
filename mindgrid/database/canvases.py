"""Canvas rows: creation, listing, renaming, nesting and AI-generated canvases.

Queries run with the service role, so every statement filters on the
caller's ``user_id`` explicitly.
"""

import uuid

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from mindgrid.database.connection import get_db_connection
from mindgrid.database.graph import (
    fetch_graph,
    insert_graph,
    is_node_type_violation,
    node_type_error,
)
from mindgrid.database.rows import to_plain
from mindgrid.exceptions.errors import NotFoundError, UserInputError
from mindgrid.utils.debug import print__canvas_debug

BREADCRUMB_COLUMNS = "id::text AS id, name, parent_canvas_id::text AS parent_canvas_id, parent_node_id::text AS parent_node_id, depth"

MARK_PORTAL_SQL = (
    "UPDATE nodes SET is_group_portal = TRUE, sub_canvas_id = %s "
    "WHERE id = %s AND canvas_id = %s"
)


# ==============================================================================
# CREATION
# ==============================================================================
def normalize_canvas_name(name) -> str:
    """Return the trimmed name or raise a 400 when nothing is left."""
    cleaned = (name or "").strip()
    if not cleaned:
        raise UserInputError("Canvas name is required")
    return cleaned


async def get_user_organization_id(cur, user_id: str):
    await cur.execute(
        "SELECT organization_id::text AS organization_id FROM profiles WHERE id = %s",
        (user_id,),
    )
    row = await cur.fetchone()
    if not row:
        return None
    return row["organization_id"] if isinstance(row, dict) else row[0]


async def create_canvas(user_id: str, name, description=None, folder_id=None):
    """Create a canvas owned by the caller.

    The organization comes from the caller's profile and is NULL when the
    profile has none. The row is written by a single INSERT ... RETURNING.

    Raises:
        UserInputError: empty name; nothing is written.
    """
    canvas_name = normalize_canvas_name(name)
    description = (description or "").strip() or None
    folder_id = folder_id or None

    async with get_db_connection() as conn:
        async with conn.cursor(row_factory=dict_row) as cur:
            organization_id = await get_user_organization_id(cur, user_id)
            print__canvas_debug(
                f"🆕 Creating canvas '{canvas_name}' for {user_id} (org={organization_id})"
            )
            await cur.execute(
                """
                INSERT INTO canvases
                    (name, description, organization_id, created_by, user_id, folder_id)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING *
                """,
                (canvas_name, description, organization_id, user_id, user_id, folder_id),
            )
            canvas = await cur.fetchone()

    canvas = to_plain(canvas)
    print__canvas_debug(f"✅ Canvas created: {canvas['id']}")
    return canvas


async def list_canvases(user_id: str):
    """Top-level canvases of the caller, most recently updated first."""
    async with get_db_connection() as conn:
        async with conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(
                """
                SELECT id, name, description, folder_id, created_at, updated_at
                FROM canvases
                WHERE user_id = %s AND parent_canvas_id IS NULL
                ORDER BY updated_at DESC
                """,
                (user_id,),
            )
            rows = await cur.fetchall()
    return [to_plain(row) for row in rows]


# ==============================================================================
# RENAME
# ==============================================================================
async def rename_canvas(user_id: str, canvas_id: str, name):
    """Rename an owned canvas and relabel the synapse nodes pointing at it.

    Relabeling runs in a savepoint; a failure there is logged and the rename
    still stands.

    Returns:
        tuple: (canvas dict, number of relabeled synapse nodes)
    """
    new_name = normalize_canvas_name(name)
    relabeled = 0

    async with get_db_connection() as conn:
        async with conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(
                "UPDATE canvases SET name = %s, updated_at = NOW() "
                "WHERE id = %s AND user_id = %s RETURNING *",
                (new_name, canvas_id, user_id),
            )
            canvas = await cur.fetchone()
            if not canvas:
                raise NotFoundError("Canvas not found")

            try:
                async with conn.transaction():
                    await cur.execute(
                        """
                        SELECT n.id::text AS id, n.data
                        FROM nodes n
                        JOIN canvases c ON c.id = n.canvas_id
                        WHERE n.type = 'synapse'
                          AND c.user_id = %s
                          AND n.data->>'subCanvasId' = %s
                        """,
                        (user_id, canvas_id),
                    )
                    synapse_rows = await cur.fetchall()
                    for row in synapse_rows:
                        data = dict(row["data"] or {})
                        data["label"] = new_name
                        await cur.execute(
                            "UPDATE nodes SET data = %s WHERE id = %s",
                            (Jsonb(data), row["id"]),
                        )
                    relabeled = len(synapse_rows)
            except psycopg.Error as exc:
                print__canvas_debug(f"⚠️ Error updating synapse nodes: {exc}")

    print__canvas_debug(
        f"✏️ Canvas {canvas_id} renamed to '{new_name}', {relabeled} synapse node(s) relabeled"
    )
    return to_plain(canvas), relabeled


# ==============================================================================
# NESTED CANVASES
# ==============================================================================
async def create_sub_canvas(user_id: str, canvas_id: str, parent_node_id, group_name=None):
    """Create a child canvas behind a group/synapse node.

    Raises:
        UserInputError: no parent node id.
        NotFoundError: parent canvas missing or not owned.
    """
    if not parent_node_id:
        raise UserInputError("Parent node ID required")

    label = group_name or "Group"
    sub_canvas_id = str(uuid.uuid4())

    async with get_db_connection() as conn:
        async with conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(
                "SELECT * FROM canvases WHERE id = %s AND user_id = %s",
                (canvas_id, user_id),
            )
            parent = await cur.fetchone()
            if not parent:
                raise NotFoundError("Canvas not found")

            await cur.execute(
                """
                INSERT INTO canvases
                    (id, name, description, created_by, user_id,
                     parent_canvas_id, parent_node_id, depth)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING *
                """,
                (
                    sub_canvas_id,
                    f"{label} Contents",
                    f"Contents of {group_name or 'group'} from {parent['name']}",
                    user_id,
                    user_id,
                    canvas_id,
                    parent_node_id,
                    (parent.get("depth") or 0) + 1,
                ),
            )
            sub_canvas = await cur.fetchone()

            try:
                async with conn.transaction():
                    await cur.execute(MARK_PORTAL_SQL, (sub_canvas_id, parent_node_id, canvas_id))
            except psycopg.Error as exc:
                print__canvas_debug(f"⚠️ Error updating parent node: {exc}")

    print__canvas_debug(f"🪆 Sub-canvas {sub_canvas_id} created under {canvas_id}")
    return to_plain(sub_canvas)


async def get_sub_canvas(user_id: str, canvas_id: str, node_id):
    """Return the sub-canvas behind ``node_id`` with its nodes and edges."""
    if not node_id:
        raise UserInputError("Node ID required")

    async with get_db_connection() as conn:
        async with conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(
                "SELECT sub_canvas_id::text AS sub_canvas_id FROM nodes "
                "WHERE id = %s AND canvas_id = %s",
                (node_id, canvas_id),
            )
            node = await cur.fetchone()
            if not node or not node.get("sub_canvas_id"):
                raise NotFoundError("Sub-canvas not found")

            sub_canvas_id = node["sub_canvas_id"]
            await cur.execute(
                "SELECT * FROM canvases WHERE id = %s AND user_id = %s",
                (sub_canvas_id, user_id),
            )
            sub_canvas = await cur.fetchone()
            if not sub_canvas:
                raise NotFoundError("Sub-canvas not found")

            nodes, edges = await fetch_graph(cur, sub_canvas_id)

    result = to_plain(sub_canvas)
    result["nodes"] = nodes
    result["edges"] = edges
    return result


async def collect_breadcrumbs(start, fetch_parent):
    """Walk ``parent_canvas_id`` links from ``start`` up to the root.

    ``fetch_parent(canvas_id)`` returns the parent row or None. Items come
    back root first. The walk stops at a canvas it has already visited.
    """
    items = []
    visited = set()
    current = start
    while current and current["id"] not in visited:
        visited.add(current["id"])
        items.insert(
            0,
            {
                "canvasId": current["id"],
                "canvasName": current["name"],
                "parentNodeId": current.get("parent_node_id"),
                "depth": current.get("depth") or 0,
            },
        )
        parent_id = current.get("parent_canvas_id")
        if not parent_id:
            break
        current = await fetch_parent(parent_id)
    return items


async def get_breadcrumbs(user_id: str, canvas_id: str):
    async with get_db_connection() as conn:
        async with conn.cursor(row_factory=dict_row) as cur:

            async def fetch_owned(target_id):
                await cur.execute(
                    f"SELECT {BREADCRUMB_COLUMNS} FROM canvases WHERE id = %s AND user_id = %s",
                    (target_id, user_id),
                )
                return await cur.fetchone()

            start = await fetch_owned(canvas_id)
            if not start:
                raise NotFoundError("Canvas not found")
            return await collect_breadcrumbs(start, fetch_owned)


# ==============================================================================
# AI-GENERATED CANVASES
# ==============================================================================
AI_CANVAS_SOURCE = "ai-conversation"

INSERT_AI_CANVAS_SQL = """
INSERT INTO canvases
    (id, name, description, organization_id, created_by, user_id, folder_id, metadata)
VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
RETURNING *
"""

INSERT_AI_SUB_CANVAS_SQL = """
INSERT INTO canvases
    (id, name, description, created_by, user_id,
     parent_canvas_id, parent_node_id, depth, metadata)
VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
"""

INSERT_AI_GENERATION_SQL = """
INSERT INTO ai_generations (user_id, canvas_id, type, metadata)
VALUES (%s, %s, 'conversation-to-mindmap', %s)
"""


def plan_sub_canvases(nodes, sub_canvases):
    """Assign ids to the nested canvases and point their synapse nodes at them.

    Returns:
        tuple: (nodes with updated synapse data, [(sub canvas id, sub canvas, label)])

    Raises:
        UserInputError: a sub-canvas names a node that is not in ``nodes``.
    """
    nodes_by_id = {node.id: node for node in nodes}
    updated = {}
    planned = []
    for sub in sub_canvases:
        synapse = nodes_by_id.get(sub.synapse_id)
        if synapse is None:
            raise UserInputError(f"Synapse node not found: {sub.synapse_id}")
        sub_canvas_id = str(uuid.uuid4())
        label = synapse.data.get("label") or "Sub Canvas"
        updated[synapse.id] = synapse.model_copy(
            update={
                "data": {**synapse.data, "subCanvasId": sub_canvas_id, "nodeCount": len(sub.nodes)}
            }
        )
        planned.append((sub_canvas_id, sub, label))
    return [updated.get(node.id, node) for node in nodes], planned


async def create_canvas_from_ai(
    user_id: str,
    name,
    nodes,
    edges,
    description=None,
    folder_id=None,
    metadata=None,
    sub_canvases=(),
):
    """Create a canvas with a generated graph and its nested canvases.

    The canvas, its nodes and edges and every sub-canvas are written in one
    transaction, so a failure leaves nothing behind. Marking the synapse
    nodes as portals and logging to ``ai_generations`` run in savepoints and
    may fail without undoing the canvas.

    Raises:
        UserInputError: empty name or a sub-canvas without its synapse node.
        ConfigurationError: a node type is rejected by ``nodes_type_check``.
    """
    canvas_name = normalize_canvas_name(name)
    description = (description or "").strip() or None
    canvas_id = str(uuid.uuid4())
    nodes, planned = plan_sub_canvases(list(nodes), list(sub_canvases or ()))
    canvas_metadata = {
        **(metadata or {}),
        "source": AI_CANVAS_SOURCE,
        "created_with": "conversation-import",
    }

    print__canvas_debug(
        f"🤖 Creating AI canvas '{canvas_name}': {len(nodes)} nodes, "
        f"{len(edges)} edges, {len(planned)} sub-canvas(es)"
    )
    try:
        async with get_db_connection() as conn:
            async with conn.transaction():
                async with conn.cursor(row_factory=dict_row) as cur:
                    organization_id = await get_user_organization_id(cur, user_id)
                    await cur.execute(
                        INSERT_AI_CANVAS_SQL,
                        (
                            canvas_id,
                            canvas_name,
                            description,
                            organization_id,
                            user_id,
                            user_id,
                            folder_id or None,
                            Jsonb(canvas_metadata),
                        ),
                    )
                    canvas = await cur.fetchone()
                    await insert_graph(cur, canvas_id, nodes, edges)

                    for sub_canvas_id, sub, label in planned:
                        await cur.execute(
                            INSERT_AI_SUB_CANVAS_SQL,
                            (
                                sub_canvas_id,
                                f"{label} - Details",
                                f"Nested content for {label}",
                                user_id,
                                user_id,
                                canvas_id,
                                sub.synapse_id,
                                1,
                                Jsonb({"source": AI_CANVAS_SOURCE, "parent_synapse": sub.synapse_id}),
                            ),
                        )
                        await insert_graph(cur, sub_canvas_id, sub.nodes, sub.edges)
                        try:
                            async with conn.transaction():
                                await cur.execute(
                                    MARK_PORTAL_SQL, (sub_canvas_id, sub.synapse_id, canvas_id)
                                )
                        except psycopg.Error as exc:
                            print__canvas_debug(f"⚠️ Error marking synapse portal: {exc}")

                    try:
                        async with conn.transaction():
                            await cur.execute(
                                INSERT_AI_GENERATION_SQL,
                                (
                                    user_id,
                                    canvas_id,
                                    Jsonb(
                                        {
                                            "node_count": len(nodes),
                                            "edge_count": len(edges),
                                            "sub_canvases_count": len(planned),
                                            "original_content_length": canvas_metadata.get(
                                                "original_content_length"
                                            ),
                                            "title": canvas_name,
                                        }
                                    ),
                                ),
                            )
                    except psycopg.Error as exc:
                        print__canvas_debug(f"⚠️ Error logging AI generation: {exc}")

    except psycopg.Error as exc:
        if is_node_type_violation(exc):
            raise node_type_error(exc) from exc
        raise

    print__canvas_debug(f"✅ AI canvas created: {canvas_id}")
    return {
        "canvas": to_plain(canvas),
        "nodes": nodes,
        "sub_canvas_ids": [sub_canvas_id for sub_canvas_id, _, _ in planned],
    }
