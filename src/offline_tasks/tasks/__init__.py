"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Location, SyncSummary) + creation helpers
- task_store.py: SQLite-backed local store (source of truth while offline)
- task_api.py: creation / list / export flow used by the front-end
"""
