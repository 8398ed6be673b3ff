from .task_store import TaskStore, validate_description, validate_title

__all__ = ["TaskStore", "validate_title", "validate_description"]
