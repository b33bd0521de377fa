"""
API Models for request/response validation and Swagger documentation
"""

from flask_restx import fields

from tempdrop.api import api

# =============================================================================
# Request Models
# =============================================================================

file_create_request = api.model(
    "FileCreateRequest",
    {
        "filename": fields.String(
            required=True, description="Storage-internal file name", example="report.pdf"
        ),
        "originalFilename": fields.String(
            required=True, description="User-facing file name", example="Q3 report.pdf"
        ),
        "mimeType": fields.String(
            required=True, description="MIME type of the content", example="application/pdf"
        ),
        "size": fields.Integer(
            required=True, description="Size in bytes", min=0, example=48213
        ),
        "objectPath": fields.String(
            required=True,
            description="Canonical object path or the upload URL that was used",
            example="/objects/uploads/3f0c2a4e-8f6b-4a57-9d1e-1c3b7f0e9a21",
        ),
        "expiresInMinutes": fields.Integer(
            description="Retention period in minutes (10, 60, 1440 or 10080)",
            example=60,
        ),
        "expirationTime": fields.DateTime(
            dt_format="iso8601",
            description="Absolute expiration (used when expiresInMinutes is absent)",
        ),
    },
)

# =============================================================================
# Response Models
# =============================================================================

upload_response = api.model(
    "UploadResponse",
    {
        "uploadUrl": fields.String(
            description="Time-limited URL to PUT the file content to"
        ),
    },
)

file_record = api.model(
    "FileRecord",
    {
        "id": fields.String(description="File identifier"),
        "filename": fields.String(description="Storage-internal file name"),
        "originalFilename": fields.String(
            attribute="original_filename", description="User-facing file name"
        ),
        "mimeType": fields.String(attribute="mime_type", description="MIME type"),
        "size": fields.Integer(description="Size in bytes"),
        "objectPath": fields.String(
            attribute="object_path", description="Canonical object path"
        ),
        "uploadTime": fields.DateTime(
            attribute="upload_time", dt_format="iso8601", description="Upload time (UTC)"
        ),
        "expirationTime": fields.DateTime(
            attribute="expiration_time",
            dt_format="iso8601",
            description="Expiration time (UTC)",
        ),
        "downloadCount": fields.Integer(
            attribute="download_count", description="Successful downloads so far"
        ),
    },
)

file_details = api.inherit(
    "FileDetails",
    file_record,
    {
        "expiresIn": fields.String(
            description="Remaining time, e.g. '9 minutes' or '6 days'"
        ),
    },
)

expiration_option = api.model(
    "ExpirationOption",
    {
        "label": fields.String(description="Display label", example="1 hour"),
        "minutes": fields.Integer(description="Retention in minutes", example=60),
    },
)

expiration_options_response = api.model(
    "ExpirationOptionsResponse",
    {
        "options": fields.List(
            fields.Nested(expiration_option), description="Allowed retention periods"
        ),
        "default": fields.Integer(description="Default retention in minutes"),
    },
)

error_response = api.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error category"),
        "title": fields.String(description="Short error title"),
        "message": fields.String(description="User-facing error message"),
        "action": fields.String(description="Suggested next step"),
    },
)
