"""
OAuth request model for LTI launches.

OAuthRequest is a thin typed wrapper around a ParameterStore: each property
reads or writes one OAuth parameter, so the store can be serialized as-is
into form fields once the request is signed.
"""

import logging
import urllib.parse
from datetime import datetime, timedelta
from typing import Mapping, MutableMapping, Optional, Tuple

from lti_oauth.constants import OAUTH
from lti_oauth.exceptions import MissingHttpMethodError, MissingUrlError
from lti_oauth.parameters import ParameterStore
from lti_oauth.querystring import parse_query_string, serialize_query_string
from lti_oauth.signature import (
    build_signature_base_string,
    compute_body_hash,
    compute_signature,
    generate_nonce,
    generate_timestamp,
    parse_timestamp,
    verify_signature as verify_base_string_signature,
)

logger = logging.getLogger(__name__)


def to_datetime(timestamp: int) -> datetime:
    """Convert seconds since the epoch to an aware UTC datetime."""
    return OAUTH.epoch + timedelta(seconds=timestamp)


def from_datetime(value: datetime) -> int:
    """Convert a datetime to seconds since the epoch. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=OAUTH.epoch.tzinfo)
    return int((value - OAUTH.epoch).total_seconds())


def _is_custom_parameter(name: str) -> bool:
    return name.startswith(OAUTH.custom_parameter_prefixes)


def _parameter_property(name: str, doc: str) -> property:
    def getter(self) -> Optional[str]:
        return self._parameters.get(name)

    def setter(self, value: Optional[str]) -> None:
        self._parameters.set(name, value)

    return property(getter, setter, doc=doc)


class OAuthRequest:
    """
    An OAuth 1.0 signed request between an LTI tool consumer and provider.

    Consumer usage:
        request = OAuthRequest("POST", "https://tool.example/launch")
        request.consumer_key = "key123"
        request.custom_parameters = "custom_color=blue"
        form_fields = request.sign("secret1")

    Provider usage:
        request = OAuthRequest.from_parameters("POST", launch_url, form_fields)
        is_valid, error = request.verify_signature("secret1")

    Instances are not thread-safe; use one per request.
    """

    body_hash = _parameter_property(OAUTH.body_hash_parameter, "The OAuth body hash.")
    callback = _parameter_property(OAUTH.callback_parameter, "The OAuth callback URL.")
    consumer_key = _parameter_property(OAUTH.consumer_key_parameter, "OAuth consumer key.")
    nonce = _parameter_property(OAUTH.nonce_parameter, "OAuth nonce.")
    signature = _parameter_property(OAUTH.signature_parameter, "OAuth signature.")
    signature_method = _parameter_property(
        OAUTH.signature_method_parameter, "The OAuth signature method."
    )
    version = _parameter_property(OAUTH.version_parameter, "The OAuth version.")

    def __init__(self, http_method: Optional[str] = None, url: Optional[str] = None):
        self.http_method = http_method
        self.url = url
        self._parameters = ParameterStore()

    @classmethod
    def from_parameters(
        cls,
        http_method: str,
        url: str,
        parameters: Mapping[str, str],
    ) -> "OAuthRequest":
        """Build a request from received form or query parameters."""
        request = cls(http_method, url)
        request.parameters.update(parameters)
        return request

    @property
    def parameters(self) -> ParameterStore:
        """All the OAuth and custom parameters in the request."""
        return self._parameters

    @property
    def timestamp(self) -> Optional[int]:
        """
        OAuth timestamp (number of seconds since 1970-01-01T00:00:00Z).

        Raises:
            TimestampParseError: If the stored value is not a signed run of ASCII digits
        """
        value = self._parameters.get(OAUTH.timestamp_parameter)
        if value is None:
            return None
        return parse_timestamp(value)

    @timestamp.setter
    def timestamp(self, value: Optional[int]) -> None:
        self._parameters.set(
            OAUTH.timestamp_parameter, None if value is None else str(int(value))
        )

    @property
    def timestamp_as_datetime(self) -> Optional[datetime]:
        """The OAuth timestamp as an aware UTC datetime."""
        timestamp = self.timestamp
        return None if timestamp is None else to_datetime(timestamp)

    @timestamp_as_datetime.setter
    def timestamp_as_datetime(self, value: Optional[datetime]) -> None:
        self.timestamp = None if value is None else from_datetime(value)

    @property
    def custom_parameters(self) -> Optional[str]:
        """
        The custom_ and _ext parameters in query string format, suitable for
        saving alongside a resource link. None when there are none.
        """
        custom = {
            name: value
            for name, value in self._parameters.items()
            if _is_custom_parameter(name)
        }
        if not custom:
            return None
        return serialize_query_string(custom)

    @custom_parameters.setter
    def custom_parameters(self, value: Optional[str]) -> None:
        # Names without a custom prefix are discarded
        for name, parameter_value in parse_query_string(value).items():
            if _is_custom_parameter(name):
                self._parameters.set(name, parameter_value)

    def _require_target(self) -> None:
        if not self.url:
            raise MissingUrlError("Cannot sign a request without a URL")
        if not self.http_method:
            raise MissingHttpMethodError("Cannot sign a request without an HTTP method")

    def generate_signature(
        self,
        consumer_secret: str,
        token_secret: str = "",
        private_key_pem: Optional[bytes] = None,
    ) -> str:
        """
        Calculate the OAuth signature for this request using its own parameters.

        This is typically used by tool providers to verify an incoming request.
        The request's own parameters are not modified.
        """
        return self.generate_signature_with(
            self._parameters.copy(),
            consumer_secret,
            token_secret=token_secret,
            private_key_pem=private_key_pem,
        )

    def generate_signature_with(
        self,
        parameters: MutableMapping[str, str],
        consumer_secret: str,
        token_secret: str = "",
        private_key_pem: Optional[bytes] = None,
    ) -> str:
        """
        Calculate the OAuth signature for this request using custom parameters.

        This is typically used by tool consumers that substitute or add
        parameters before signing. Every query string pair of the URL is
        signed alongside ``parameters``, and query keys are removed from
        ``parameters`` afterwards so the remaining parameters can be sent as
        form fields without repeating the query.

        Args:
            parameters: Working parameter set to sign; modified in place
            consumer_secret: The OAuth consumer secret
            token_secret: The OAuth token secret, empty for LTI launches
            private_key_pem: PEM-encoded RSA private key, RSA-SHA1 only

        Returns:
            The calculated oauth_signature

        Raises:
            MissingUrlError: If the request has no URL
            MissingHttpMethodError: If the request has no HTTP method
            UnsupportedSignatureMethodError: If the signature method is unknown
        """
        self._require_target()

        query = parse_query_string(urllib.parse.urlsplit(self.url).query)

        try:
            base_string = build_signature_base_string(self.http_method, self.url, parameters)
            signature = compute_signature(
                base_string,
                consumer_secret,
                signature_method=parameters.get(OAUTH.signature_method_parameter),
                token_secret=token_secret,
                private_key_pem=private_key_pem,
            )
        finally:
            # Query parameters travel in the URL, not in the form fields
            for name in query:
                parameters.pop(name, None)

        return signature

    def sign(
        self,
        consumer_secret: str,
        signature_method: Optional[str] = None,
        token_secret: str = "",
        private_key_pem: Optional[bytes] = None,
    ) -> ParameterStore:
        """
        Fill in the OAuth protocol parameters and sign the request.

        Nonce, timestamp and version are only set when missing. The signature
        is stored on the request.

        Args:
            consumer_secret: The OAuth consumer secret
            signature_method: Overrides the request's signature method
                (default: the stored one, else HMAC-SHA1)
            token_secret: The OAuth token secret, empty for LTI launches
            private_key_pem: PEM-encoded RSA private key, RSA-SHA1 only

        Returns:
            The parameters to send as form fields (URL query parameters excluded)
        """
        if self.nonce is None:
            self.nonce = generate_nonce()
        if self.timestamp is None:
            self.timestamp = generate_timestamp()
        if self.version is None:
            self.version = OAUTH.version
        if signature_method is not None:
            self.signature_method = signature_method
        elif self.signature_method is None:
            self.signature_method = OAUTH.default_signature_method

        form_parameters = self._parameters.copy()
        self.signature = self.generate_signature_with(
            form_parameters,
            consumer_secret,
            token_secret=token_secret,
            private_key_pem=private_key_pem,
        )
        form_parameters.set(OAUTH.signature_parameter, self.signature)

        logger.debug(
            "Signed %s request to %s for consumer %s",
            self.http_method,
            self.url,
            self.consumer_key,
        )
        return form_parameters

    def set_body_hash(self, body) -> str:
        """Set oauth_body_hash from the raw request body (LTI Outcomes)."""
        self.body_hash = compute_body_hash(body)
        return self.body_hash

    def verify_signature(
        self,
        consumer_secret: str = "",
        token_secret: str = "",
        public_key_pem: Optional[bytes] = None,
    ) -> Tuple[bool, Optional[str]]:
        """
        Verify the received oauth_signature against the request parameters.

        Args:
            consumer_secret: The OAuth consumer secret
            token_secret: The OAuth token secret, empty for LTI launches
            public_key_pem: PEM-encoded RSA public key, RSA-SHA1 only

        Returns:
            Tuple of (is_valid, error_message)

        Raises:
            MissingUrlError: If the request has no URL
            MissingHttpMethodError: If the request has no HTTP method
            UnsupportedSignatureMethodError: If the signature method is unknown
        """
        self._require_target()

        base_string = build_signature_base_string(self.http_method, self.url, self._parameters)
        return verify_base_string_signature(
            base_string,
            self.signature,
            consumer_secret,
            signature_method=self.signature_method,
            token_secret=token_secret,
            public_key_pem=public_key_pem,
        )
