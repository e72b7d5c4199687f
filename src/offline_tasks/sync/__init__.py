"""
Sync engine.

Components:
- orchestrator.py: reconciliation run + single-flight guard
- triggers.py: decides when a run happens
- connectivity.py: online/offline signal
- background.py: deferred "sync-tasks" registrations
"""
