"""
Celery Application Instance

Creates the Celery app instance for use by workers and beat scheduler.
Uses the app factory to ensure all services are properly initialized.
"""

from app_factory import create_app

# Create Flask app with all services initialized (including dependency container)
flask_app = create_app()

# Get Celery instance from Flask app
celery_app = flask_app.celery

# Register task module imports on the Celery instance by name to avoid
# importing task modules at module-import time (tasks -> reaper_task ->
# celery_app -> tasks). The worker imports them when it starts.
celery_app.conf.imports = (
    "tempdrop.tasks.reaper_task",
)
