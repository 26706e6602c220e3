#!/usr/bin/env python3
"""Allow the ``synapse`` node type in the ``nodes_type_check`` constraint.

Drops the constraint if present and recreates it with the full allow-list in
one transaction, so running it again is harmless and a failed ADD leaves the
old constraint in place. When the database cannot be reached or
rejects the statements, the SQL is printed for manual use in the Supabase
SQL editor.

Usage:
    mindgrid-add-synapse-type
    python add_synapse_node_type.py
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
import psycopg

from mindgrid.database.connection import get_direct_connection
from mindgrid.models.requests import NODE_TYPES
from mindgrid.utils.debug import print__migration_debug

DROP_CONSTRAINT_SQL = "ALTER TABLE nodes DROP CONSTRAINT IF EXISTS nodes_type_check;"
ADD_CONSTRAINT_SQL = (
    "ALTER TABLE nodes ADD CONSTRAINT nodes_type_check\n"
    "  CHECK (type IN ({}));".format(", ".join(f"'{t}'" for t in NODE_TYPES))
)
CONSTRAINT_SQL = f"{DROP_CONSTRAINT_SQL}\n\n{ADD_CONSTRAINT_SQL}"


def print_manual_sql():
    print("\nPlease run the following SQL in your Supabase SQL editor:")
    print(f"\n{CONSTRAINT_SQL}\n")


async def apply_node_type_constraint(conn) -> bool:
    """Run both statements over ``conn`` in one transaction.

    Returns True on success. On a database error the DROP is rolled back
    with the ADD, the SQL is printed for manual application and False is
    returned.
    """
    try:
        async with conn.transaction():
            await conn.execute(DROP_CONSTRAINT_SQL)
            await conn.execute(ADD_CONSTRAINT_SQL)
    except psycopg.Error as exc:
        print(f"❌ Error updating constraint: {exc}")
        print_manual_sql()
        return False
    print("✅ Successfully added synapse node type!")
    return True


async def run() -> int:
    try:
        async with get_direct_connection(autocommit=True) as conn:
            applied = await apply_node_type_constraint(conn)
    except (psycopg.Error, OSError) as exc:
        print(f"❌ Cannot connect to the database: {exc}")
        print__migration_debug(f"Connection failure type: {type(exc).__name__}")
        print_manual_sql()
        return 1
    return 0 if applied else 1


def main():
    print("🚀 Node type constraint update")
    print("=" * 50)
    try:
        sys.exit(asyncio.run(run()))
    except KeyboardInterrupt:
        print("\n\n⚠️  Update interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
