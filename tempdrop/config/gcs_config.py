"""
Google Cloud Storage Configuration

Reads GCS settings and builds the storage client.
"""

import logging
import os
from typing import Optional

from google.cloud import storage
from google.oauth2 import service_account

logger = logging.getLogger(__name__)


class GCSConfig:
    """GCS configuration settings."""

    def __init__(self):
        self.bucket_name = os.getenv("GCS_BUCKET_NAME")
        self.private_prefix = os.getenv("GCS_PRIVATE_PREFIX", "private")
        self.credentials_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")


def create_gcs_client(config: Optional[GCSConfig] = None) -> storage.Client:
    """
    Create a Google Cloud Storage client.

    Uses the service account file from GOOGLE_APPLICATION_CREDENTIALS when
    it exists, application default credentials otherwise.

    Args:
        config: GCS configuration, uses default if None

    Returns:
        storage.Client instance
    """
    if config is None:
        config = GCSConfig()

    if config.credentials_path and os.path.exists(config.credentials_path):
        credentials = service_account.Credentials.from_service_account_file(
            config.credentials_path
        )
        logger.info(f"GCS client initialized with service account: {config.credentials_path}")
        return storage.Client(credentials=credentials)

    logger.info("GCS client initialized with default credentials")
    return storage.Client()
