"""
Object Gateway Factory

Factory for creating the object gateway implementation selected by the
STORAGE_BACKEND environment variable. The application layer stays
decoupled from the concrete adapter via the ObjectGateway interface.
"""

import logging
import os
from typing import Optional

from tempdrop.domain.file_storage.object_gateway import ObjectGateway
from tempdrop.domain.file_storage.signed_url_service import SignedUrlService

logger = logging.getLogger(__name__)

LOCAL_BACKEND = "local"
GCS_BACKEND = "gcs"


class ObjectGatewayFactory:
    """Factory that returns the configured object gateway."""

    @staticmethod
    def create_gateway(
        backend: Optional[str] = None,
        signer: Optional[SignedUrlService] = None,
        upload_ttl_seconds: int = 900,
        storage_dir: Optional[str] = None,
    ) -> ObjectGateway:
        """
        Create the object gateway for the configured backend.

        Args:
            backend: 'local' or 'gcs' (default: STORAGE_BACKEND env var, then 'local')
            signer: Upload URL signer for the local backend
            upload_ttl_seconds: Lifetime of issued upload URLs
            storage_dir: Base directory for the local backend
                (default: STORAGE_DIR env var, then /tmp/tempdrop)

        Returns:
            ObjectGateway implementation

        Environment Variables:
            STORAGE_BACKEND: 'local' or 'gcs'
            STORAGE_DIR: Base directory for local storage (default: /tmp/tempdrop)
            GCS_BUCKET_NAME, GCS_PRIVATE_PREFIX: Settings for the GCS backend

        Raises:
            ValueError: If the backend name is unknown or GCS is misconfigured
        """
        backend = (backend or os.getenv("STORAGE_BACKEND", LOCAL_BACKEND)).lower()

        if backend == LOCAL_BACKEND:
            return ObjectGatewayFactory._create_local_gateway(
                signer, upload_ttl_seconds, storage_dir
            )
        if backend == GCS_BACKEND:
            return ObjectGatewayFactory._create_gcs_gateway(upload_ttl_seconds)

        raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r} (expected 'local' or 'gcs')")

    @staticmethod
    def _create_local_gateway(
        signer: Optional[SignedUrlService],
        upload_ttl_seconds: int,
        storage_dir: Optional[str] = None,
    ) -> ObjectGateway:
        from tempdrop.infrastructure.local_object_gateway import LocalObjectGateway

        storage_dir = storage_dir or os.getenv("STORAGE_DIR", "/tmp/tempdrop")
        gateway = LocalObjectGateway(
            storage_dir, signer=signer, upload_ttl_seconds=upload_ttl_seconds
        )
        logger.info(f"Object gateway: using local filesystem storage at {storage_dir}")
        return gateway

    @staticmethod
    def _create_gcs_gateway(upload_ttl_seconds: int) -> ObjectGateway:
        from tempdrop.config.gcs_config import GCSConfig, create_gcs_client
        from tempdrop.infrastructure.gcs_object_gateway import GCSObjectGateway

        config = GCSConfig()
        if not config.bucket_name:
            raise ValueError("GCS_BUCKET_NAME must be set when STORAGE_BACKEND=gcs")

        gateway = GCSObjectGateway(
            config.bucket_name,
            private_prefix=config.private_prefix,
            client=create_gcs_client(config),
            upload_ttl_seconds=upload_ttl_seconds,
        )
        logger.info(f"Object gateway: using GCS bucket {config.bucket_name}")
        return gateway
