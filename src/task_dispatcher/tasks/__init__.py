"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskListItem, TaskResult, EntryOutcome)
- task_store.py: SQLite-backed storage (list/get/add/delete)
- dispatcher.py: one pass over due tasks + task registration
- task_loop.py: async polling driver that repeats passes
- timeutil.py: due-time parsing and comparison
"""
