#!/usr/bin/env python3
"""Convert every ``emoji`` node into a ``synapse`` node.

Each node gets ``type = 'synapse'``, a 200x200 style and ``data.label =
'Synapse'``; the rest of ``data`` is kept, including ``emoji`` when present.
Rows are updated one at a time on an autocommit connection, so a failing row
is reported and the remaining rows are still migrated.

Usage:
    mindgrid-migrate-emoji
    python migrate_emoji_to_synapse.py
"""

# CRITICAL: Set Windows event loop policy FIRST, before any other imports
# This must be the very first thing that happens to fix psycopg compatibility
import asyncio
import sys

if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Load environment variables early
from dotenv import load_dotenv

load_dotenv()

# Standard imports
from dataclasses import dataclass, field
from typing import Dict, List

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from mindgrid.config.settings import get_db_config
from mindgrid.database.connection import get_direct_connection
from mindgrid.utils.debug import print__migration_debug

SYNAPSE_TYPE = "synapse"
SYNAPSE_LABEL = "Synapse"
SYNAPSE_STYLE = {"width": 200, "height": 200}

SELECT_EMOJI_NODES_SQL = "SELECT id::text AS id, data FROM nodes WHERE type = 'emoji'"
UPDATE_NODE_SQL = "UPDATE nodes SET type = %s, style = %s, data = %s WHERE id = %s"


@dataclass
class MigrationReport:
    """Outcome of one migration run: ids migrated and ids that failed with why."""

    found: int = 0
    migrated: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def synapse_data(data):
    """Merge existing node data with the synapse label.

    ``emoji`` is carried over untouched; when it is missing it stays missing.
    """
    merged = dict(data or {})
    merged["label"] = SYNAPSE_LABEL
    return merged


async def migrate_emoji_nodes(conn) -> MigrationReport:
    """Migrate all emoji nodes over ``conn``, which must be in autocommit mode."""
    report = MigrationReport()

    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute(SELECT_EMOJI_NODES_SQL)
        rows = await cur.fetchall()

    report.found = len(rows)
    print(f"Found {report.found} emoji nodes to migrate")

    for row in rows:
        node_id = row["id"]
        try:
            await conn.execute(
                UPDATE_NODE_SQL,
                (
                    SYNAPSE_TYPE,
                    Jsonb(dict(SYNAPSE_STYLE)),
                    Jsonb(synapse_data(row.get("data"))),
                    node_id,
                ),
            )
        except psycopg.Error as exc:
            report.failed[node_id] = str(exc).strip()
            print(f"❌ Error updating node {node_id}: {exc}")
            continue
        report.migrated.append(node_id)
        print(f"✅ Migrated node {node_id} from emoji to synapse")

    return report


async def run() -> int:
    missing = [k for k, v in get_db_config().items() if k != "port" and not v]
    if missing:
        print(f"❌ Missing required environment variables: {', '.join(missing)}")
        return 1

    try:
        async with get_direct_connection(autocommit=True) as conn:
            report = await migrate_emoji_nodes(conn)
    except psycopg.Error as exc:
        print(f"❌ Migration error: {exc}")
        return 1

    if report.found == 0:
        print("No emoji nodes to migrate")
    print(
        f"Migration complete! migrated={len(report.migrated)} failed={len(report.failed)}"
    )
    print__migration_debug(f"Failed ids: {sorted(report.failed)}")
    return 0 if report.ok else 1


def main():
    print("🚀 Emoji → Synapse node migration")
    print("=" * 50)
    try:
        sys.exit(asyncio.run(run()))
    except KeyboardInterrupt:
        print("\n\n⚠️  Migration interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
