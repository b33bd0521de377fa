"""
TempDrop REST API

Upload and file metadata endpoints with OpenAPI/Swagger documentation.
Blob downloads are served by the separate objects blueprint.
"""

from flask import Blueprint
from flask_restx import Api

# Blueprint for the JSON API
api_bp = Blueprint("api", __name__, url_prefix="/api")

# Initialize Flask-RESTX API with Swagger documentation
api = Api(
    api_bp,
    version="1.0",
    title="TempDrop API",
    description="Temporary file sharing with automatic expiration",
    doc="/docs",  # Swagger UI will be available at /api/docs
    contact="TempDrop Team",
    license="MIT",
)

# Import namespaces after api is created to avoid circular imports
from .namespaces import files_ns, upload_ns  # noqa: E402

# Register namespaces
api.add_namespace(upload_ns, path="/upload")
api.add_namespace(files_ns, path="/files")
