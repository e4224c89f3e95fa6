"""Batch job infrastructure."""

from macrobias.infrastructure.jobs.task_queue import BoundedTaskQueue

__all__ = ["BoundedTaskQueue"]
