"""
Task subsystem.

Components:
- task_models.py: data structures (Task, EditDraft, TaskEvent)
- task_errors.py: edit session error taxonomy
- task_gateway.py: JSON codec + ordered writes to the key-value store
- task_store.py: authoritative in-memory collection + mutations
- edit_session.py: single active edit workflow on top of TaskStore
- task_api.py: small high-level helpers used by the presentation layer
"""
