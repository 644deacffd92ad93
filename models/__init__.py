"""ORM models exposed by the SmartTask application."""
from .task import Task

__all__ = ["Task"]
