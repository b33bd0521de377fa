"""
main.py

Flask backend for TempDrop, a temporary file-sharing service.

Dependencies:
  - Python packages: Flask, flask-restx, flask-cors, redis, celery,
    google-cloud-storage
  - Infrastructure: Redis server (only for METADATA_BACKEND=redis or
    REAPER_MODE=celery)

Notes:
  - API endpoints available at /api/ with Swagger docs at /api/docs
  - Blob downloads at /objects/<path>
  - Uses application factory pattern for better testability
"""

import os

from app_factory import create_app

app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", 8000))
    debug = os.getenv("FLASK_DEBUG", "false").lower() == "true"

    # The reloader would start a second reaper scheduler
    app.run(host=host, port=port, debug=debug, use_reloader=False)
