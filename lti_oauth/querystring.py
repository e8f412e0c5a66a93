"""
Query string parsing and serialization for OAuth parameter sets.

Parsing follows the usual form-encoding convention (``+`` decodes to a
space). Serialization always writes ``%20`` for a space so the output can be
compared with the percent-encoding used in signature base strings.
"""

import urllib.parse
from typing import List, Mapping, Optional, Tuple

from lti_oauth.exceptions import QueryStringError
from lti_oauth.parameters import ParameterStore


def parse_query_pairs(qs: Optional[str], strict: bool = False) -> List[Tuple[str, str]]:
    """
    Decode a percent-encoded query string into (name, value) pairs.

    Repeated names are all kept, in their original order.

    By default parsing is tolerant: empty fragments and fragments with an
    empty name are dropped, a fragment without ``=`` becomes a name with an
    empty value, invalid ``%`` escapes are kept as literal text and escapes
    that are not valid UTF-8 decode to U+FFFD.

    Args:
        qs: Query string, with or without a leading "?". None and "" are allowed.
        strict: Reject malformed fragments and invalid UTF-8 instead

    Raises:
        QueryStringError: In strict mode, if any fragment is malformed
    """
    if not qs:
        return []

    if qs.startswith("?"):
        qs = qs[1:]

    try:
        pairs = urllib.parse.parse_qsl(
            qs,
            keep_blank_values=True,
            strict_parsing=strict,
            errors="strict" if strict else "replace",
        )
    except ValueError as e:
        # UnicodeDecodeError is a ValueError too
        raise QueryStringError(f"Malformed query string: {e}") from e

    result = []
    for name, value in pairs:
        if not name:
            if strict:
                raise QueryStringError(f"Empty parameter name in query string: {qs!r}")
            continue
        result.append((name, value))
    return result


def parse_query_string(qs: Optional[str], strict: bool = False) -> ParameterStore:
    """
    Decode a percent-encoded query string into a ParameterStore.

    Parsing rules are those of parse_query_pairs().

    Returns:
        ParameterStore with one value per name (the last occurrence wins)

    Raises:
        QueryStringError: In strict mode, if any fragment is malformed
    """
    return ParameterStore(parse_query_pairs(qs, strict=strict))


def serialize_query_string(parameters: Mapping[str, str]) -> str:
    """
    Encode parameters as ``name=value`` pairs joined by ``&``.

    Names are written in sorted order so equal parameter sets always
    serialize to the same string.
    """
    return urllib.parse.urlencode(
        sorted(parameters.items()), quote_via=urllib.parse.quote, safe=""
    )
