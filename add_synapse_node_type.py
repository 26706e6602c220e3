#!/usr/bin/env python3
"""
Add the synapse node type to the nodes_type_check constraint.

Usage:
    python add_synapse_node_type.py
"""

from mindgrid.maintenance.node_type_constraint import main

if __name__ == "__main__":
    main()
