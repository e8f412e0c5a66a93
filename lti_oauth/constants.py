"""
Protocol constants shared by every module of the library.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class OAuthConstants:
    """OAuth 1.0 parameter names and defaults used by LTI 1.x launches."""

    body_hash_parameter: str = "oauth_body_hash"
    callback_parameter: str = "oauth_callback"
    consumer_key_parameter: str = "oauth_consumer_key"
    nonce_parameter: str = "oauth_nonce"
    signature_method_parameter: str = "oauth_signature_method"
    signature_parameter: str = "oauth_signature"
    timestamp_parameter: str = "oauth_timestamp"
    version_parameter: str = "oauth_version"

    # Only these prefixes are visible through OAuthRequest.custom_parameters
    custom_parameter_prefixes: tuple[str, ...] = ("custom_", "_ext")

    epoch: datetime = datetime(1970, 1, 1, tzinfo=timezone.utc)
    default_ports: Mapping[str, int] = field(
        default_factory=lambda: MappingProxyType({"http": 80, "https": 443})
    )

    default_signature_method: str = "HMAC-SHA1"
    version: str = "1.0"

    max_timestamp_age_seconds: int = 300
    future_timestamp_tolerance_seconds: int = 60


OAUTH = OAuthConstants()
