"""
Maintenance commands for the MindGrid database.

One-off operations run from the command line against the Supabase Postgres
instance.
"""

from .emoji_to_synapse import MigrationReport, migrate_emoji_nodes
from .node_type_constraint import CONSTRAINT_SQL, apply_node_type_constraint

__all__ = [
    "CONSTRAINT_SQL",
    "MigrationReport",
    "apply_node_type_constraint",
    "migrate_emoji_nodes",
]
