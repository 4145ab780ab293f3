"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, Assignee) and id helpers
- task_transform.py: backend record <-> Task mapping
- task_api.py: async HTTP client for the backend /tasks resource
- task_store.py: in-memory collection with optimistic updates and rollback
"""
