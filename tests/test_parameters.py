"""
Unit tests for the parameter store and the query string codec.
"""

import unittest

from lti_oauth.exceptions import QueryStringError
from lti_oauth.parameters import ParameterStore
from lti_oauth.querystring import (
    parse_query_pairs,
    parse_query_string,
    serialize_query_string,
)


class TestParameterStore(unittest.TestCase):
    """Test ParameterStore operations."""

    def test_set_and_get(self):
        """Test setting and reading a parameter."""
        store = ParameterStore()
        store.set("oauth_nonce", "abc")

        self.assertEqual(store.get("oauth_nonce"), "abc")
        self.assertEqual(store["oauth_nonce"], "abc")

    def test_last_write_wins(self):
        """Test that setting a name twice keeps only the last value."""
        store = ParameterStore()
        store.set("custom_a", "1")
        store.set("custom_a", "2")

        self.assertEqual(store.get("custom_a"), "2")
        self.assertEqual(len(store), 1)

    def test_get_missing_returns_none(self):
        """Test that an absent name is not an error."""
        store = ParameterStore()

        self.assertIsNone(store.get("oauth_callback"))
        self.assertNotIn("oauth_callback", store)

    def test_names_are_case_sensitive(self):
        """Test that names differing in case are separate parameters."""
        store = ParameterStore()
        store.set("Custom_A", "upper")
        store.set("custom_a", "lower")

        self.assertEqual(store.get("Custom_A"), "upper")
        self.assertEqual(store.get("custom_a"), "lower")

    def test_set_none_removes(self):
        """Test that setting None removes the parameter."""
        store = ParameterStore(oauth_nonce="abc")
        store.set("oauth_nonce", None)

        self.assertNotIn("oauth_nonce", store)

    def test_keys(self):
        """Test listing the names currently set."""
        store = ParameterStore({"b": "2", "a": "1"})

        self.assertEqual(set(store.keys()), {"a", "b"})

    def test_values_are_strings(self):
        """Test that non-string values are stored as strings."""
        store = ParameterStore()
        store["resource_link_id"] = 1

        self.assertEqual(store.get("resource_link_id"), "1")

    def test_copy_is_independent(self):
        """Test that a copy does not share state with the original."""
        store = ParameterStore({"a": "1"})
        copy = store.copy()
        copy.set("b", "2")
        del copy["a"]

        self.assertEqual(dict(store), {"a": "1"})
        self.assertEqual(dict(copy), {"b": "2"})

    def test_equals_dict(self):
        """Test comparison with a plain dict."""
        self.assertEqual(ParameterStore({"a": "1"}), {"a": "1"})


class TestParseQueryString(unittest.TestCase):
    """Test query string parsing."""

    def test_parse_basic(self):
        """Test parsing a simple query string."""
        params = parse_query_string("key1=value1&key2=value2")

        self.assertEqual(dict(params), {"key1": "value1", "key2": "value2"})

    def test_parse_percent_decoding(self):
        """Test that values are percent-decoded and '+' means space."""
        params = parse_query_string("a=x+y&b=1%2B1&c=%E2%98%83")

        self.assertEqual(params["a"], "x y")
        self.assertEqual(params["b"], "1+1")
        self.assertEqual(params["c"], "☃")

    def test_parse_empty_input(self):
        """Test that None and empty strings parse to an empty set."""
        self.assertEqual(len(parse_query_string(None)), 0)
        self.assertEqual(len(parse_query_string("")), 0)
        self.assertEqual(len(parse_query_string("?")), 0)

    def test_parse_leading_question_mark(self):
        """Test that a leading '?' is ignored."""
        self.assertEqual(dict(parse_query_string("?foo=bar")), {"foo": "bar"})

    def test_parse_repeated_name_last_wins(self):
        """Test that a repeated name keeps the last value."""
        self.assertEqual(parse_query_string("a=1&a=2")["a"], "2")

    def test_parse_tolerant_skips_malformed_fragments(self):
        """Test tolerant parsing drops empty fragments and empty names."""
        params = parse_query_string("a=1&&=orphan&b&c=3")

        self.assertEqual(dict(params), {"a": "1", "b": "", "c": "3"})

    def test_parse_tolerant_keeps_invalid_escape(self):
        """Test that an invalid percent escape is kept literally."""
        self.assertEqual(parse_query_string("a=%zz")["a"], "%zz")

    def test_parse_strict_accepts_well_formed(self):
        """Test strict parsing of a well-formed query string."""
        params = parse_query_string("a=1&b=", strict=True)

        self.assertEqual(dict(params), {"a": "1", "b": ""})

    def test_parse_strict_rejects_empty_fragment(self):
        """Test strict parsing rejects '&&'."""
        with self.assertRaises(QueryStringError):
            parse_query_string("a=1&&b=2", strict=True)

    def test_parse_strict_rejects_missing_equals(self):
        """Test strict parsing rejects a fragment without '='."""
        with self.assertRaises(QueryStringError):
            parse_query_string("a=1&b", strict=True)

    def test_parse_strict_rejects_empty_name(self):
        """Test strict parsing rejects a fragment with an empty name."""
        with self.assertRaises(QueryStringError):
            parse_query_string("=orphan", strict=True)

    def test_parse_tolerant_replaces_invalid_utf8(self):
        """Test that escapes that are not UTF-8 decode to U+FFFD."""
        self.assertEqual(parse_query_string("a=%FF")["a"], "\ufffd")

    def test_parse_strict_rejects_invalid_utf8(self):
        """Test strict parsing rejects escapes that are not UTF-8."""
        with self.assertRaises(QueryStringError):
            parse_query_string("a=%FF", strict=True)

    def test_parse_pairs_keeps_repeated_names(self):
        """Test that pair parsing keeps every occurrence in order."""
        self.assertEqual(
            parse_query_pairs("?a=2&b=&a=1&&=x"),
            [("a", "2"), ("b", ""), ("a", "1")],
        )

    def test_query_string_error_is_value_error(self):
        """Test that parse errors can be caught as ValueError."""
        with self.assertRaises(ValueError):
            parse_query_string("b", strict=True)


class TestSerializeQueryString(unittest.TestCase):
    """Test query string serialization."""

    def test_serialize_sorted(self):
        """Test that names are written in sorted order."""
        self.assertEqual(serialize_query_string({"b": "2", "a": "1"}), "a=1&b=2")

    def test_serialize_space_is_not_plus(self):
        """Test that a space is encoded as %20 and '+' as %2B."""
        self.assertEqual(
            serialize_query_string({"custom_a": "x y", "custom_b": "1+1"}),
            "custom_a=x%20y&custom_b=1%2B1",
        )

    def test_serialize_reserved_characters(self):
        """Test that reserved characters are escaped."""
        self.assertEqual(
            serialize_query_string({"custom_url": "http://x/?a=b&c"}),
            "custom_url=http%3A%2F%2Fx%2F%3Fa%3Db%26c",
        )

    def test_serialize_empty(self):
        """Test serializing an empty set."""
        self.assertEqual(serialize_query_string({}), "")

    def test_serialize_then_parse(self):
        """Test that parsing the serialized form gives back the same values."""
        params = {"custom_name": "Ladies + Gentlemen", "_ext_unicode": "été"}

        self.assertEqual(dict(parse_query_string(serialize_query_string(params))), params)


if __name__ == "__main__":
    unittest.main()
