"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, TaskFilter, TaskMetrics) + JSON codec
- blob_store.py: key/blob durable storage backends (SQLite, file, memory)
- blob_writer.py: ordered write pipeline between the store and a backend
- task_store.py: in-memory task collection that persists on every mutation
"""
