"""
API Namespaces - Organized endpoint groups
"""

from flask import current_app, request
from flask_restx import Namespace, Resource, inputs, marshal

from tempdrop.api.error_mapping import domain_error_response
from tempdrop.api.models import (
    error_response,
    expiration_options_response,
    file_create_request,
    file_details,
    file_record,
    upload_response,
)
from tempdrop.domain.errors import (
    DomainError,
    ErrorCategory,
    InvalidExpirationError,
    create_error_response,
)
from tempdrop.domain.file_storage import (
    ExpirationOption,
    NewFileRecord,
    resolve_expiration,
    utc_now,
)

# =============================================================================
# Upload Namespace - Upload URL issuance
# =============================================================================

upload_ns = Namespace("upload", description="Upload URL operations")


@upload_ns.route("")
class UploadUrl(Resource):
    """Issue a signed upload URL"""

    @upload_ns.doc("create_upload_url")
    @upload_ns.response(200, "Success", upload_response)
    @upload_ns.response(500, "Storage Error", error_response)
    def post(self):
        """
        Get a time-limited upload URL

        PUT the file content to the returned URL, then register the file
        with POST /api/files using the same URL (or its object path).
        """
        try:
            handle = current_app.file_manager.issue_upload()
            return {"uploadUrl": handle.upload_url}, 200

        except DomainError as e:
            current_app.logger.error(f"Failed to issue upload URL: {e}")
            return domain_error_response(e)
        except Exception as e:
            current_app.logger.exception(f"Unexpected error in /upload: {str(e)}")
            return create_error_response(
                ErrorCategory.SYSTEM_ERROR,
                f"Unexpected error: {str(e)}",
                status_code=500,
            )


# =============================================================================
# Files Namespace - File metadata operations
# =============================================================================

files_ns = Namespace("files", description="File metadata operations")


def _parse_expiration_time(value):
    """Parse the optional 'expirationTime' field."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidExpirationError("'expirationTime' must be an ISO-8601 string")
    try:
        return inputs.datetime_from_iso8601(value)
    except ValueError as e:
        raise InvalidExpirationError(
            f"'expirationTime' is not a valid ISO-8601 timestamp: {value!r}",
            original_error=e,
        ) from e


@files_ns.route("")
class FileList(Resource):
    """Register uploaded files"""

    @files_ns.doc("register_file")
    @files_ns.expect(file_create_request)
    @files_ns.response(201, "File registered", file_record)
    @files_ns.response(400, "Bad Request", error_response)
    @files_ns.response(500, "Internal Server Error", error_response)
    def post(self):
        """
        Register metadata for an uploaded file

        Either 'expiresInMinutes' (10, 60, 1440 or 10080) or an absolute
        'expirationTime' must be supplied; the relative value wins when
        both are present. An absolute time is rounded up to the nearest
        allowed period.
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return create_error_response(
                ErrorCategory.INVALID_REQUEST,
                "Request body must be a JSON object",
                status_code=400,
            )

        try:
            expiration_time = resolve_expiration(
                utc_now(),
                expires_in_minutes=data.get("expiresInMinutes"),
                expiration_time=_parse_expiration_time(data.get("expirationTime")),
            )
            fields = NewFileRecord(
                filename=data.get("filename"),
                original_filename=data.get("originalFilename"),
                mime_type=data.get("mimeType"),
                size=data.get("size"),
                object_path=data.get("objectPath"),
                expiration_time=expiration_time,
            )

            record = current_app.file_manager.register_file(fields)
            return marshal(record, file_record), 201

        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            current_app.logger.exception(f"Unexpected error registering file: {str(e)}")
            return create_error_response(
                ErrorCategory.SYSTEM_ERROR,
                f"Failed to register file: {str(e)}",
                status_code=500,
            )


@files_ns.route("/options")
class ExpirationOptions(Resource):
    """Allowed retention periods"""

    @files_ns.doc("get_expiration_options")
    @files_ns.response(200, "Success", expiration_options_response)
    def get(self):
        """List the retention periods a file can be registered with"""
        return {
            "options": [
                {"label": label, "minutes": minutes}
                for label, minutes in ExpirationOption.choices()
            ],
            "default": ExpirationOption.default().value,
        }, 200


@files_ns.route("/<string:file_id>")
@files_ns.param("file_id", "The file identifier")
class File(Resource):
    """File metadata"""

    @files_ns.doc("get_file")
    @files_ns.response(200, "Success", file_details)
    @files_ns.response(404, "File Not Found", error_response)
    @files_ns.response(410, "File Expired", error_response)
    @files_ns.response(500, "Internal Server Error", error_response)
    def get(self, file_id):
        """
        Get file metadata

        Returns 410 once the file has expired, even before the reaper
        has removed it.
        """
        now = utc_now()
        try:
            record = current_app.file_manager.get_file(file_id, now)

            payload = marshal(record, file_record)
            payload["expiresIn"] = record.expires_in(now)
            return payload, 200

        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            current_app.logger.exception(f"Error getting file {file_id}: {str(e)}")
            return create_error_response(
                ErrorCategory.SYSTEM_ERROR,
                f"Internal server error: {str(e)}",
                status_code=500,
            )
