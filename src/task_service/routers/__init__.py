from . import health_routes, task_routes, user_routes

__all__ = ["health_routes", "task_routes", "user_routes"]
