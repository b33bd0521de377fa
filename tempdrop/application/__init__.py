"""
Application Services Layer

Orchestrates domain services and coordinates use cases.
"""

from .dependency_container import DependencyContainer, DependencyNotFoundError
from .event_publisher import EventPublisher
from .reaper_scheduler import ReaperScheduler
from .reaper_service import ExpiredFileReaper, ReapFailure, ReapReport

__all__ = [
    'DependencyContainer',
    'DependencyNotFoundError',
    'EventPublisher',
    'ExpiredFileReaper',
    'ReapFailure',
    'ReapReport',
    'ReaperScheduler',
]
