"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Notification, ViewMode)
- task_store.py: SQLite-backed storage + query/update helpers
- flat_store.py: the same API over two delimited text files
- reminders.py: reminder time arithmetic and formatting
"""
