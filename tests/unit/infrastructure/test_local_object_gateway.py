"""
Unit tests for LocalObjectGateway.

Covers upload URL signing, path validation, atomic writes and the
behavior of open streams after the reaper unlinks a blob.
"""

import os
from io import BytesIO
from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

import pytest

from tempdrop.domain.errors import ObjectNotFoundError, ObjectStorageError
from tempdrop.domain.file_storage.object_gateway import object_key
from tempdrop.infrastructure.local_object_gateway import LocalObjectGateway


class TestUploadHandle:
    def test_upload_url_is_signed_for_its_path(self, local_gateway, signer):
        handle = local_gateway.issue_upload_handle()

        parts = urlsplit(handle.upload_url)
        query = {k: v[0] for k, v in parse_qs(parts.query).items()}
        assert parts.scheme == "http" and parts.netloc == "testserver"
        assert parts.path == handle.object_path
        assert signer.validate(handle.object_path, query["signature"], query["expires"])

    def test_upload_ttl(self, tmp_path, signer):
        gateway = LocalObjectGateway(str(tmp_path), signer=signer, upload_ttl_seconds=60)

        handle = gateway.issue_upload_handle()
        query = parse_qs(urlsplit(handle.upload_url).query)

        assert int(query["expires"][0]) == int(handle.expires_at.timestamp())


class TestNormalizePath:
    def test_strips_host_and_query(self, local_gateway):
        raw = "http://testserver/objects/uploads/abc?expires=1&signature=f"

        assert local_gateway.normalize_path(raw) == "/objects/uploads/abc"

    def test_relative_url(self, local_gateway):
        assert local_gateway.normalize_path("/objects/uploads/abc?x=1") == "/objects/uploads/abc"

    def test_foreign_paths_are_left_unchanged(self, local_gateway):
        assert local_gateway.normalize_path("https://elsewhere/a/b") == "https://elsewhere/a/b"
        assert local_gateway.normalize_path("") == ""


class TestPathValidation:
    @pytest.mark.parametrize(
        "path",
        ["/objects/../etc/passwd", "/objects/uploads/../../x", "/other/abc", "/objects/", ""],
    )
    def test_object_key_rejects_invalid_paths(self, path):
        with pytest.raises(ValueError):
            object_key(path)

    def test_read_invalid_path_is_not_found(self, local_gateway):
        with pytest.raises(ObjectNotFoundError):
            local_gateway.read_stream("/objects/../secret")

    def test_delete_invalid_path_is_a_no_op(self, local_gateway):
        local_gateway.delete_object("/objects/../secret")

    def test_object_exists_invalid_path(self, local_gateway):
        assert local_gateway.object_exists("/not-an-object") is False


class TestWrites:
    def test_write_creates_nested_directories(self, local_gateway):
        local_gateway.write_object("/objects/uploads/deep/file", BytesIO(b"abc"))

        assert (local_gateway.base_path / "uploads" / "deep" / "file").read_bytes() == b"abc"

    def test_large_write_is_chunked_and_complete(self, local_gateway):
        payload = os.urandom(300 * 1024)

        written = local_gateway.write_object("/objects/uploads/big", BytesIO(payload))

        assert written == len(payload)
        with local_gateway.read_stream("/objects/uploads/big") as stream:
            assert stream.read() == payload

    def test_failed_write_leaves_no_partial_blob(self, local_gateway):
        class BrokenStream:
            def __init__(self):
                self.calls = 0

            def read(self, size):
                self.calls += 1
                if self.calls > 1:
                    raise OSError("connection reset")
                return b"partial"

        with pytest.raises(ObjectStorageError):
            local_gateway.write_object("/objects/uploads/a", BrokenStream())

        assert not local_gateway.object_exists("/objects/uploads/a")
        assert list((local_gateway.base_path / "uploads").iterdir()) == []

    def test_replace_failure_is_storage_error(self, local_gateway):
        with patch(
            "tempdrop.infrastructure.local_object_gateway.os.replace",
            side_effect=PermissionError("read-only"),
        ):
            with pytest.raises(ObjectStorageError):
                local_gateway.write_object("/objects/uploads/a", BytesIO(b"x"))

        assert list((local_gateway.base_path / "uploads").iterdir()) == []


class TestReadsAndDeletes:
    def test_open_stream_survives_delete(self, local_gateway):
        local_gateway.write_object("/objects/uploads/a", BytesIO(b"still here"))
        stream = local_gateway.read_stream("/objects/uploads/a")

        local_gateway.delete_object("/objects/uploads/a")

        try:
            assert stream.read() == b"still here"
        finally:
            stream.close()
        assert not local_gateway.object_exists("/objects/uploads/a")

    def test_directory_is_not_a_blob(self, local_gateway):
        local_gateway.write_object("/objects/uploads/dir/file", BytesIO(b"x"))

        with pytest.raises(ObjectNotFoundError):
            local_gateway.read_stream("/objects/uploads/dir")

    def test_delete_permission_error_is_storage_error(self, local_gateway):
        local_gateway.write_object("/objects/uploads/a", BytesIO(b"x"))

        with patch("pathlib.Path.unlink", side_effect=PermissionError("denied")):
            with pytest.raises(ObjectStorageError):
                local_gateway.delete_object("/objects/uploads/a")


def test_base_directory_creation_failure(tmp_path, signer):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")

    with pytest.raises(ObjectStorageError):
        LocalObjectGateway(str(blocker / "sub"), signer=signer)
