"""
Celery Tasks

This module contains the Celery tasks of the temporary file service.
"""

from .reaper_task import reap_expired_files

__all__ = ['reap_expired_files']
