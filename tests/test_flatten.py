"""Tests for flattening nested documents and shortening their keys."""

from shipper.flatten import SHORT_KEY_MAX_LENGTH, flatten_json, shorten_key


def test_flatten_joins_nested_keys_with_dots():
    document = {"a": {"b": 1, "c": {"d": "x"}}, "e": 2}
    assert flatten_json(document) == {"a.b": 1, "a.c.d": "x", "e": 2}


def test_flatten_keeps_lists_as_leaves():
    assert flatten_json({"records": [{"a": 1}], "tags": ["x", "y"]}) == {
        "records": [{"a": 1}],
        "tags": ["x", "y"],
    }


def test_flatten_keeps_null_and_empty_object_leaves():
    assert flatten_json({"a": None, "b": {}}) == {"a": None, "b": {}}


def test_flatten_non_object_is_empty():
    assert flatten_json([1, 2]) == {}
    assert flatten_json("text") == {}


def test_shorten_single_segment_keeps_case():
    assert shorten_key("resourceId") == "resourceId"


def test_shorten_keeps_last_two_segments():
    assert shorten_key("properties.status.code") == "status_code"
    assert shorten_key("identity.claims") == "identity_claims"


def test_shorten_replaces_invalid_characters():
    assert shorten_key("claims.http://schemas/name") == "claims_http___schemas_name"


def test_shorten_truncates_long_keys():
    assert len(shorten_key("k" * 500)) == SHORT_KEY_MAX_LENGTH
