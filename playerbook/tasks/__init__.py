"""
Celery Tasks Module
Imports and registers all Celery tasks for the application
"""

from . import image_tasks

__all__ = [
    'image_tasks',
]
