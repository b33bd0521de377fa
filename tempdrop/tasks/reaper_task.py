"""
Reaper Task

Celery beat task that reclaims expired files.
Thin wrapper that delegates to ExpiredFileReaper.
"""

import logging
from typing import Any, Dict

from celery_app import celery_app
from tempdrop.config.celery_config import REAP_TASK_NAME

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name=REAP_TASK_NAME)
def reap_expired_files(self) -> Dict[str, Any]:
    """
    Periodic task that removes expired blobs and their metadata.

    Resolves ExpiredFileReaper from the DependencyContainer and runs one
    cycle. The reaper contains its own failures; they are part of the
    returned report and retried on the next tick.

    Returns:
        dict: ReapReport as a dictionary
    """
    from celery_app import flask_app
    from tempdrop.application.reaper_service import ExpiredFileReaper

    reaper = flask_app.container.resolve(ExpiredFileReaper)
    report = reaper.run_cycle()

    if report.failures:
        logger.warning(
            f"Reaper task left {len(report.failures)} failure(s) for the next cycle"
        )
    return report.to_dict()
