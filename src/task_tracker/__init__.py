"""
Task tracker package.

Per-user task lists with accounts. The identity and task stores keep whole
collections behind a per-collection lock; the FastAPI app in
``task_tracker.main`` is a thin HTTP surface over them.
"""

__version__ = "0.1.0"
