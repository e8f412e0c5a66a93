"""Errors raised by the signing pipeline."""


class OAuthError(ValueError):
    """Base class for invalid input to the signing pipeline."""


class MissingUrlError(OAuthError):
    """The request has no resource URL to sign."""


class MissingHttpMethodError(OAuthError):
    """The request has no HTTP method to sign."""


class TimestampParseError(OAuthError):
    """The stored oauth_timestamp is not an integer."""


class UnsupportedSignatureMethodError(OAuthError):
    """The oauth_signature_method is not one this library implements."""


class QueryStringError(OAuthError):
    """A query string could not be parsed in strict mode."""
