"""
Consumer credential registry for tool providers.

Provides a thread-safe keyring mapping OAuth consumer keys to their shared
secrets (or RSA public keys), with support for several valid secrets per
consumer while a secret is being rotated.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

from lti_oauth.constants import OAUTH
from lti_oauth.exceptions import OAuthError
from lti_oauth.request import OAuthRequest
from lti_oauth.signature import RSA_SHA1, verify_timestamp

logger = logging.getLogger(__name__)


@dataclass
class ConsumerSecret:
    """One shared secret of a consumer."""

    secret: str
    is_valid: bool = True  # Can be used for verification (during rotation)


@dataclass
class ConsumerCredentials:
    """Credentials of one tool consumer."""

    consumer_key: str
    secrets: list[ConsumerSecret] = field(default_factory=list)
    public_key_pem: Optional[bytes] = None  # For RSA-SHA1

    def valid_secrets(self) -> list[str]:
        return [s.secret for s in self.secrets if s.is_valid]


class ConsumerKeyring:
    """
    Manages the consumers a tool provider accepts launches from.

    Thread-safe registry that allows:
    - Several secrets to be valid for one consumer simultaneously
    - Old secrets to be invalidated once a consumer has switched over
    - RSA-SHA1 consumers registered with a public key

    Usage:
        keyring = ConsumerKeyring()
        keyring.add_consumer("moodle", "secret-v1")
        keyring.add_consumer("moodle", "secret-v2")  # rotation

        request = OAuthRequest.from_parameters("POST", launch_url, form_fields)
        is_valid, error = keyring.verify_request(request)

        # After rotation is complete
        keyring.mark_secret_invalid("moodle", "secret-v1")
    """

    def __init__(self):
        self._consumers: dict[str, ConsumerCredentials] = {}
        self._lock = threading.RLock()

    def add_consumer(
        self,
        consumer_key: str,
        secret: Optional[str] = None,
        public_key_pem: Optional[bytes] = None,
    ) -> None:
        """
        Register a consumer, or add a secret to an existing one.

        Args:
            consumer_key: The oauth_consumer_key the consumer sends
            secret: Shared secret for HMAC and PLAINTEXT signatures
            public_key_pem: PEM-encoded public key for RSA-SHA1 signatures

        Raises:
            ValueError: If neither a secret nor a public key is given
        """
        if secret is None and public_key_pem is None:
            raise ValueError("At least one of secret or public_key_pem is required")

        with self._lock:
            credentials = self._consumers.setdefault(
                consumer_key, ConsumerCredentials(consumer_key=consumer_key)
            )
            if secret is not None and secret not in [s.secret for s in credentials.secrets]:
                credentials.secrets.append(ConsumerSecret(secret=secret))
            if public_key_pem is not None:
                credentials.public_key_pem = public_key_pem

    def get_consumer(self, consumer_key: str) -> Optional[ConsumerCredentials]:
        """Get a consumer by key."""
        with self._lock:
            return self._consumers.get(consumer_key)

    def remove_consumer(self, consumer_key: str) -> None:
        """Remove a consumer and all of its secrets."""
        with self._lock:
            self._consumers.pop(consumer_key, None)

    def mark_secret_invalid(self, consumer_key: str, secret: str) -> None:
        """
        Mark one secret of a consumer as invalid (won't be used for verification).

        Raises:
            ValueError: If the consumer is unknown
        """
        with self._lock:
            credentials = self._consumers.get(consumer_key)
            if credentials is None:
                raise ValueError(f"Consumer '{consumer_key}' not found")
            for consumer_secret in credentials.secrets:
                if consumer_secret.secret == secret:
                    consumer_secret.is_valid = False

    def list_consumers(self) -> dict[str, dict[str, Any]]:
        """
        List all consumers with their status.

        Returns:
            Dictionary of consumer_key -> {valid_secrets, invalid_secrets, has_public_key}
        """
        with self._lock:
            result = {}
            for consumer_key, credentials in self._consumers.items():
                valid = len(credentials.valid_secrets())
                result[consumer_key] = {
                    "valid_secrets": valid,
                    "invalid_secrets": len(credentials.secrets) - valid,
                    "has_public_key": credentials.public_key_pem is not None,
                }
            return result

    def verify_request(
        self,
        request: OAuthRequest,
        max_age_seconds: int = OAUTH.max_timestamp_age_seconds,
        check_timestamp: bool = True,
    ) -> tuple[bool, Optional[str]]:
        """
        Verify a received request, finding the consumer by its oauth_consumer_key.

        Args:
            request: The received request
            max_age_seconds: Maximum age of oauth_timestamp
            check_timestamp: Whether to reject stale or future timestamps

        Returns:
            Tuple of (is_valid, error_message)
        """
        consumer_key = request.consumer_key
        if not consumer_key:
            return False, "Missing oauth_consumer_key"

        with self._lock:
            credentials = self._consumers.get(consumer_key)
            if credentials is None:
                logger.warning("Launch from unknown consumer %s", consumer_key)
                return False, f"Unknown consumer: {consumer_key}"
            valid_secrets = credentials.valid_secrets()
            public_key_pem = credentials.public_key_pem

        if check_timestamp:
            is_valid_time, time_error = verify_timestamp(
                request.parameters.get(OAUTH.timestamp_parameter), max_age_seconds
            )
            if not is_valid_time:
                logger.warning("Rejected launch from %s: %s", consumer_key, time_error)
                return False, f"Timestamp validation failed: {time_error}"

        try:
            if (request.signature_method or "").upper() == RSA_SHA1:
                if public_key_pem is None:
                    return False, f"Consumer '{consumer_key}' has no public key"
                is_valid, error = request.verify_signature(public_key_pem=public_key_pem)
            else:
                if not valid_secrets:
                    return False, f"Consumer '{consumer_key}' has no valid secret"
                is_valid, error = False, "Signature mismatch"
                for secret in valid_secrets:
                    is_valid, error = request.verify_signature(secret)
                    if is_valid:
                        break
        except OAuthError as e:
            logger.warning("Rejected launch from %s: %s", consumer_key, e)
            return False, str(e)

        if not is_valid:
            logger.warning("Rejected launch from %s: %s", consumer_key, error)
        return is_valid, error
