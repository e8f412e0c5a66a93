"""
OAuth 1.0 signature base string construction and signing.

The base string is built as described in RFC 5849 section 3.4.1 and signed
with HMAC-SHA1 by default, which is what LTI 1.x tool consumers and
providers expect.
"""

import base64
import hashlib
import hmac
import logging
import re
import secrets
import time
import urllib.parse
from collections.abc import Iterable, Mapping
from typing import Optional, Tuple, Union

from lti_oauth.asymmetric import compute_rsa_sha1_signature, verify_rsa_sha1_signature
from lti_oauth.constants import OAUTH
from lti_oauth.exceptions import (
    OAuthError,
    TimestampParseError,
    UnsupportedSignatureMethodError,
)
from lti_oauth.querystring import parse_query_pairs

logger = logging.getLogger(__name__)

HMAC_SHA1 = "HMAC-SHA1"
HMAC_SHA256 = "HMAC-SHA256"
PLAINTEXT = "PLAINTEXT"
RSA_SHA1 = "RSA-SHA1"

# Map signature method names to hashlib functions
HMAC_METHODS = {
    HMAC_SHA1: hashlib.sha1,
    HMAC_SHA256: hashlib.sha256,
}

SUPPORTED_SIGNATURE_METHODS = (HMAC_SHA1, HMAC_SHA256, PLAINTEXT, RSA_SHA1)

# ASCII digits only, so "+5", " 12 " and "1_000" are rejected
TIMESTAMP_PATTERN = re.compile(r"-?[0-9]+")

BodyParameters = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def percent_encode(value: Optional[str]) -> str:
    """
    Percent-encode a value per RFC 3986.

    Unreserved characters (ALPHA, DIGIT, "-", ".", "_", "~") pass through,
    everything else is UTF-8 encoded and escaped with uppercase hex digits.
    A space becomes %20, never "+".
    """
    if value is None:
        return ""
    return urllib.parse.quote(str(value), safe="~")


def normalize_url(url: str) -> str:
    """
    Reduce a URL to the scheme, authority and path used in the base string.

    The scheme and host are lowercased, the port is kept only when it is not
    the default for the scheme, and the query string and fragment are dropped.

    Raises:
        OAuthError: If the URL has no scheme/host or an invalid port
    """
    parts = urllib.parse.urlsplit(url)
    scheme = parts.scheme.lower()
    host = parts.hostname
    if not scheme or not host:
        raise OAuthError(f"Cannot sign a relative URL: {url}")

    if ":" in host:
        host = f"[{host}]"

    try:
        port = parts.port
    except ValueError as e:
        raise OAuthError(f"Invalid port in URL: {url}") from e

    authority = host
    if port is not None and port != OAUTH.default_ports.get(scheme):
        authority = f"{host}:{port}"

    return f"{scheme}://{authority}{parts.path or '/'}"


def build_signature_base_string(
    http_method: str,
    url: str,
    parameters: Mapping[str, str],
    body_parameters: Optional[BodyParameters] = None,
) -> str:
    """
    Build the canonical signature base string for a request.

    Args:
        http_method: HTTP method of the request (any case)
        url: Full resource URL; every pair of its query string is signed
        parameters: Protocol, custom and form parameters; oauth_signature is ignored
        body_parameters: Extra form parameters, as a mapping or (name, value) pairs

    Returns:
        "METHOD&encoded-base-url&encoded-parameters"
    """
    pairs = [
        (name, value)
        for name, value in parameters.items()
        if name != OAUTH.signature_parameter
    ]

    # Query pairs are added as a multiset, same-named parameters included
    pairs.extend(
        (name, value)
        for name, value in parse_query_pairs(urllib.parse.urlsplit(url).query)
        if name != OAUTH.signature_parameter
    )

    if body_parameters:
        items = (
            body_parameters.items()
            if isinstance(body_parameters, Mapping)
            else body_parameters
        )
        pairs.extend(
            (name, value) for name, value in items if name != OAUTH.signature_parameter
        )

    encoded_pairs = sorted(
        (percent_encode(name), percent_encode(value)) for name, value in pairs
    )
    normalized_parameters = "&".join(f"{name}={value}" for name, value in encoded_pairs)

    base_string = "&".join(
        [
            http_method.upper(),
            percent_encode(normalize_url(url)),
            percent_encode(normalized_parameters),
        ]
    )
    logger.debug("Signature base string: %s", base_string)
    return base_string


def build_signing_key(consumer_secret: Optional[str], token_secret: Optional[str] = "") -> str:
    """Join the encoded consumer and token secrets with "&"."""
    return f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"


def compute_signature(
    base_string: str,
    consumer_secret: Optional[str],
    signature_method: Optional[str] = None,
    token_secret: Optional[str] = "",
    private_key_pem: Optional[bytes] = None,
    encoding: str = "utf-8",
) -> str:
    """
    Sign a base string.

    Args:
        base_string: Output of build_signature_base_string()
        consumer_secret: Shared secret of the consumer
        signature_method: HMAC-SHA1 (default), HMAC-SHA256, PLAINTEXT or RSA-SHA1
        token_secret: Token secret, empty for LTI launches
        private_key_pem: PEM-encoded RSA private key, RSA-SHA1 only
        encoding: Text encoding for key and message (default: utf-8)

    Returns:
        The oauth_signature value

    Raises:
        UnsupportedSignatureMethodError: If the signature method is unknown
        OAuthError: If RSA-SHA1 is requested without a private key
    """
    method = (signature_method or OAUTH.default_signature_method).upper()

    if method in HMAC_METHODS:
        h = hmac.new(
            build_signing_key(consumer_secret, token_secret).encode(encoding),
            base_string.encode(encoding),
            HMAC_METHODS[method],
        )
        return base64.b64encode(h.digest()).decode("ascii")

    if method == PLAINTEXT:
        return build_signing_key(consumer_secret, token_secret)

    if method == RSA_SHA1:
        if private_key_pem is None:
            raise OAuthError("RSA-SHA1 signing requires a private key")
        return compute_rsa_sha1_signature(base_string, private_key_pem, encoding=encoding)

    raise UnsupportedSignatureMethodError(
        f"Unsupported signature method: {signature_method}. "
        f"Use one of {', '.join(SUPPORTED_SIGNATURE_METHODS)}."
    )


def verify_signature(
    base_string: str,
    signature: Optional[str],
    consumer_secret: Optional[str] = "",
    signature_method: Optional[str] = None,
    token_secret: Optional[str] = "",
    public_key_pem: Optional[bytes] = None,
    encoding: str = "utf-8",
) -> Tuple[bool, Optional[str]]:
    """
    Verify a received signature against a base string.

    Returns:
        Tuple of (is_valid, error_message)

    Raises:
        UnsupportedSignatureMethodError: If the signature method is unknown
    """
    if not signature:
        return False, "Missing signature"

    method = (signature_method or OAUTH.default_signature_method).upper()

    if method == RSA_SHA1:
        if public_key_pem is None:
            return False, "RSA-SHA1 verification requires a public key"
        return verify_rsa_sha1_signature(base_string, signature, public_key_pem, encoding=encoding)

    expected_signature = compute_signature(
        base_string,
        consumer_secret,
        signature_method=method,
        token_secret=token_secret,
        encoding=encoding,
    )

    # Compare signatures (using constant-time comparison)
    if hmac.compare_digest(expected_signature.encode(encoding), signature.encode(encoding)):
        return True, None
    return False, "Signature mismatch"


def compute_body_hash(body: Union[str, bytes], encoding: str = "utf-8") -> str:
    """Compute the oauth_body_hash value (base64 SHA-1) of a raw request body."""
    if isinstance(body, str):
        body = body.encode(encoding)
    return base64.b64encode(hashlib.sha1(body).digest()).decode("ascii")


def generate_nonce() -> str:
    """Generate a random oauth_nonce value."""
    return secrets.token_hex(16)


def generate_timestamp() -> int:
    """Current time as an oauth_timestamp value."""
    return int(time.time())


def parse_timestamp(value: Union[int, str, None]) -> int:
    """
    Parse an oauth_timestamp value.

    Only an optional "-" followed by ASCII digits is accepted.

    Raises:
        TimestampParseError: If the value is not a whole number of seconds
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if not isinstance(value, str) or not TIMESTAMP_PATTERN.fullmatch(value):
        raise TimestampParseError(f"Invalid timestamp: {value!r}")
    return int(value)


def verify_timestamp(
    timestamp: Union[int, str, None],
    max_age_seconds: int = OAUTH.max_timestamp_age_seconds,
    now: Optional[int] = None,
) -> Tuple[bool, Optional[str]]:
    """
    Verify that an oauth_timestamp is within acceptable age.

    Args:
        timestamp: Seconds since the epoch, as int or decimal string
        max_age_seconds: Maximum acceptable age in seconds (default: 5 minutes)
        now: Current time in seconds since the epoch (default: time.time())

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        request_time = parse_timestamp(timestamp)
    except TimestampParseError:
        return False, f"Invalid timestamp: {timestamp!r}"

    current_time = generate_timestamp() if now is None else now
    age = current_time - request_time

    if age > max_age_seconds:
        return False, f"Request timestamp too old: {age} seconds (max: {max_age_seconds})"

    # Small tolerance for clock skew
    if -age > OAUTH.future_timestamp_tolerance_seconds:
        return False, "Request timestamp is in the future"

    return True, None
