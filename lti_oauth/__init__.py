"""
OAuth 1.0 Request Signing for LTI Tool Consumers and Providers.

Builds the OAuth signature base string from a request's method, URL and
parameters, and computes or verifies its HMAC-SHA1 (or HMAC-SHA256,
PLAINTEXT, RSA-SHA1) signature.

Consumer Usage:
    from lti_oauth import OAuthRequest

    request = OAuthRequest("POST", "https://tool.example/launch")
    request.consumer_key = "key123"
    request.custom_parameters = "custom_color=blue"

    # Form fields to POST to the tool, including oauth_signature
    form_fields = request.sign("secret1")

Provider Usage:
    from lti_oauth import ConsumerKeyring, OAuthRequest

    keyring = ConsumerKeyring()
    keyring.add_consumer("key123", "secret1")

    request = OAuthRequest.from_parameters("POST", launch_url, form_fields)
    is_valid, error = keyring.verify_request(request)

Low-level Usage:
    from lti_oauth import build_signature_base_string, compute_signature

    base_string = build_signature_base_string("POST", url, parameters)
    signature = compute_signature(base_string, "secret1")
"""

from lti_oauth.constants import OAUTH, OAuthConstants

from lti_oauth.exceptions import (
    MissingHttpMethodError,
    MissingUrlError,
    OAuthError,
    QueryStringError,
    TimestampParseError,
    UnsupportedSignatureMethodError,
)

from lti_oauth.parameters import ParameterStore

from lti_oauth.querystring import (
    parse_query_pairs,
    parse_query_string,
    serialize_query_string,
)

from lti_oauth.signature import (
    build_signature_base_string,
    compute_body_hash,
    compute_signature,
    generate_nonce,
    generate_timestamp,
    normalize_url,
    parse_timestamp,
    percent_encode,
    verify_signature,
    verify_timestamp,
)

from lti_oauth.asymmetric import generate_key_pair

from lti_oauth.request import OAuthRequest

from lti_oauth.keyring import ConsumerKeyring

from lti_oauth.jsonld import JsonLdObject

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Configuration
    "OAUTH",
    "OAuthConstants",
    # Errors
    "MissingHttpMethodError",
    "MissingUrlError",
    "OAuthError",
    "QueryStringError",
    "TimestampParseError",
    "UnsupportedSignatureMethodError",
    # Parameters
    "ParameterStore",
    "parse_query_pairs",
    "parse_query_string",
    "serialize_query_string",
    # Signing
    "build_signature_base_string",
    "compute_body_hash",
    "compute_signature",
    "generate_key_pair",
    "generate_nonce",
    "generate_timestamp",
    "normalize_url",
    "parse_timestamp",
    "percent_encode",
    "verify_signature",
    "verify_timestamp",
    # Requests
    "OAuthRequest",
    "ConsumerKeyring",
    # JSON-LD
    "JsonLdObject",
]
