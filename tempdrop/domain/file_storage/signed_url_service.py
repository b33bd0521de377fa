"""
Signed URL Service

Service for generating time-limited signed upload URLs for the local
object store. The signature covers the object path and the expiry
timestamp, so neither can be altered without invalidating the URL.
"""

import hashlib
import hmac
import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from urllib.parse import urlencode


@dataclass
class SignedUrl:
    """
    Represents a signed URL with expiration and validation.
    """

    url: str
    object_path: str
    expires_at: datetime
    signature: str

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the signed URL has expired."""
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "url": self.url,
            "object_path": self.object_path,
            "expires_at": self.expires_at.isoformat(),
            "signature": self.signature,
        }


class SignedUrlService:
    """
    Service for generating and validating signed upload URLs.

    Uses HMAC-SHA256 over '<object_path>:<expires epoch>' and constant-time
    comparison on validation.
    """

    def __init__(
        self, secret_key: Optional[str] = None, base_url: Optional[str] = None
    ):
        """
        Initialize SignedUrlService.

        Args:
            secret_key: Secret key for HMAC signing (optional, uses SECRET_KEY
                env var or generates one if not provided)
            base_url: Public base URL prepended to object paths. Defaults to
                the PUBLIC_BASE_URL environment variable, or relative URLs
                when unset.
        """
        self.secret_key = (
            secret_key or os.getenv("SECRET_KEY") or self._generate_secret_key()
        )
        if base_url is None:
            base_url = os.getenv("PUBLIC_BASE_URL", "")
        self.base_url = base_url.rstrip("/")

    @staticmethod
    def _generate_secret_key(length: int = 32) -> str:
        """Generate a cryptographically secure secret key."""
        return secrets.token_hex(length)

    def generate_signed_url(self, object_path: str, expires_at: datetime) -> SignedUrl:
        """
        Generate a signed URL for writing to object_path.

        Args:
            object_path: Canonical object path, e.g. '/objects/uploads/abc'
            expires_at: When the URL stops being accepted

        Returns:
            SignedUrl with the full URL and its signature
        """
        expires = int(expires_at.timestamp())
        signature = self._generate_signature(object_path, expires)
        query = urlencode({"expires": expires, "signature": signature})

        return SignedUrl(
            url=f"{self.base_url}{object_path}?{query}",
            object_path=object_path,
            expires_at=datetime.fromtimestamp(expires, tz=timezone.utc),
            signature=signature,
        )

    def _generate_signature(self, object_path: str, expires: int) -> str:
        """
        Generate HMAC signature for an object path and expiry.

        Args:
            object_path: Canonical object path
            expires: Expiry as epoch seconds

        Returns:
            HMAC signature as hex string
        """
        message = f"{object_path}:{expires}"

        return hmac.new(
            self.secret_key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256
        ).hexdigest()

    def validate_signature(self, object_path: str, signature: str, expires: int) -> bool:
        """
        Validate HMAC signature for an object path.

        Args:
            object_path: Canonical object path
            signature: HMAC signature to validate
            expires: Expiry as epoch seconds

        Returns:
            True if signature is valid, False otherwise
        """
        expected_signature = self._generate_signature(object_path, expires)

        # Constant-time comparison; bytes so non-ASCII input compares unequal
        return hmac.compare_digest(
            signature.encode("utf-8"), expected_signature.encode("utf-8")
        )

    def validate(
        self,
        object_path: str,
        signature: Optional[str],
        expires: Optional[str],
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Validate the query parameters of a signed URL.

        Args:
            object_path: Canonical object path the request targets
            signature: 'signature' query parameter
            expires: 'expires' query parameter (epoch seconds)
            now: Reference time (defaults to the current time)

        Returns:
            True if the signature matches and the URL has not expired
        """
        if not signature or not expires:
            return False

        try:
            expires_epoch = int(expires)
        except (TypeError, ValueError):
            return False

        if not self.validate_signature(object_path, signature, expires_epoch):
            return False

        now = now or datetime.now(timezone.utc)
        return now.timestamp() < expires_epoch
