"""
Objects Blueprint

Serves blob downloads at /objects/<path> and, for the local storage
backend, accepts signed uploads at /objects/uploads/<id>.
"""

from flask import Blueprint, current_app, jsonify, request, send_file

from tempdrop.api.error_mapping import domain_error_response
from tempdrop.domain.errors import DomainError, ErrorCategory, create_error_response
from tempdrop.domain.file_storage import SignedUrlService
from tempdrop.domain.file_storage.object_gateway import (
    OBJECTS_PREFIX,
    UPLOADS_DIR,
    ObjectGateway,
)

objects_bp = Blueprint("objects", __name__, url_prefix="/objects")


def _error(category: ErrorCategory, message: str, status_code: int):
    body, status = create_error_response(category, message, status_code=status_code)
    return jsonify(body), status


@objects_bp.route("/<path:object_path>", methods=["GET"])
def download_object(object_path):
    """
    Stream a live file's content as an attachment.

    404 if no record or blob exists, 410 if the file has expired.
    """
    canonical_path = f"{OBJECTS_PREFIX}{object_path}"

    try:
        record, stream = current_app.file_manager.open_download(canonical_path)
    except DomainError as e:
        body, status = domain_error_response(e)
        if status >= 500:
            current_app.logger.error(f"[OBJECTS] Failed to open {canonical_path}: {e}")
        return jsonify(body), status
    except Exception as e:
        current_app.logger.exception(
            f"[OBJECTS] Error serving {canonical_path}: {str(e)}"
        )
        return _error(
            ErrorCategory.SYSTEM_ERROR, f"Internal server error: {str(e)}", 500
        )

    current_app.logger.info(f"[OBJECTS] Serving file {record.id} from {canonical_path}")

    return send_file(
        stream,
        mimetype=record.mime_type,
        as_attachment=True,
        download_name=record.original_filename,
        max_age=0,
    )


@objects_bp.route(f"/{UPLOADS_DIR}/<string:upload_id>", methods=["PUT"])
def upload_object(upload_id):
    """
    Accept file content for a signed local upload URL.

    The request body is the raw file content.
    """
    if current_app.config.get("STORAGE_BACKEND") != "local":
        return _error(
            ErrorCategory.INVALID_REQUEST,
            "Direct uploads are only accepted by the local storage backend",
            404,
        )

    object_path = f"{OBJECTS_PREFIX}{UPLOADS_DIR}/{upload_id}"
    signer = current_app.container.resolve(SignedUrlService)

    if not signer.validate(
        object_path, request.args.get("signature"), request.args.get("expires")
    ):
        current_app.logger.warning(f"[OBJECTS] Rejected upload to {object_path}")
        return _error(
            ErrorCategory.INVALID_SIGNATURE, "Invalid or expired upload signature", 403
        )

    gateway = current_app.container.resolve(ObjectGateway)
    try:
        size = gateway.write_object(object_path, request.stream)
    except DomainError as e:
        current_app.logger.error(f"[OBJECTS] Upload to {object_path} failed: {e}")
        body, status = domain_error_response(e)
        return jsonify(body), status

    return jsonify({"objectPath": object_path, "size": size}), 200
