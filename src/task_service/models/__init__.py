from .task import Task

# This file will serve as the central point for importing all models
# within the task_service.models package.
