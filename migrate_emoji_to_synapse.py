#!/usr/bin/env python3
"""
Migrate emoji nodes to synapse nodes.

Usage:
    python migrate_emoji_to_synapse.py
"""

from mindgrid.maintenance.emoji_to_synapse import main

if __name__ == "__main__":
    main()
