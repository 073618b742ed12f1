"""tmsync — Transfermarkt catalog sync.

Pulls player, team and competition data from the Transfermarkt REST API
and upserts it into a local SQLite catalog keyed by external id.
"""

__version__ = "0.1.0"
