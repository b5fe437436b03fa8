# Shiptivity clients: swimlane ordering, persistence, and validation
#
# Components:
#   schema.py      - Data model (Client, Lane)
#   errors.py      - Request-level error kinds with short/long messages
#   store.py       - SQLite persistence layer (one long-lived connection)
#   validation.py  - Id, status and priority input checks
#   reorder.py     - Position rebalancing on status / priority changes
#   config.py      - Server configuration (YAML + env + CLI)
