"""Application layer - archive pipeline and its ports."""

from discordreaper.application.context import RunContext
from discordreaper.application.worker_pool import BoundedWorkerPool

__all__ = [
    "RunContext",
    "BoundedWorkerPool",
]
