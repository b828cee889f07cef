"""Tests for prefix composition and range translation."""

import pytest

from sublevel import InvalidNamespaceError, KeyRange, Level, sublevel
from sublevel import keyspace


class TestComposePrefix:
    def test_top_level(self):
        assert keyspace.compose_prefix(b"", b"items") == b"\x00items/"

    def test_unnamed(self):
        assert keyspace.compose_prefix(b"", b"") == b"\x00/"

    def test_nested(self):
        parent = keyspace.compose_prefix(b"", b"items")
        assert keyspace.compose_prefix(parent, b"posts") == b"\x00items/\x00posts/"


class TestValidateSegment:
    def test_str_encoded(self):
        assert keyspace.validate_segment("café") == "café".encode("utf-8")

    def test_bytes_passthrough(self):
        assert keyspace.validate_segment(b"items") == b"items"

    @pytest.mark.parametrize("name", ["a\x00b", "a\x01b", b"\x01"])
    def test_reserved_bytes_rejected(self, name):
        with pytest.raises(InvalidNamespaceError, match="cannot contain"):
            keyspace.validate_segment(name)

    def test_non_string_rejected(self):
        with pytest.raises(TypeError, match="str or bytes"):
            keyspace.validate_segment(42)  # type: ignore

    def test_slash_allowed(self):
        assert keyspace.validate_segment("a/b") == b"a/b"


class TestPrefixKey:
    def test_prefix_key(self):
        sub = sublevel(Level(), "items")
        assert sub.prefix_key("foo") == b"\x00items/\x01foo"

    def test_nested_prefix_key(self):
        sub = sublevel(Level(), "items").sublevel("posts")
        assert sub.prefix_key("foo") == b"\x00items/\x00posts/\x01foo"

    def test_json_key(self):
        sub = sublevel(Level(), "items", key_encoding="json")
        assert sub.prefix_key({"a": 1}) == b'\x00items/\x01{"a": 1}'

    def test_per_call_encoding(self):
        sub = sublevel(Level(), "items")
        assert sub.prefix_key([1], options={"key_encoding": "json"}) == b"\x00items/\x01[1]"

    @pytest.mark.parametrize("key", ["foo", "", "a/b", "über", "\x00\x01"])
    def test_strip_round_trip(self, key):
        sub = sublevel(Level(), "items").sublevel("posts")
        assert sub.strip_prefix(sub.prefix_key(key)) == key

    def test_binary_round_trip(self):
        sub = sublevel(Level(), "items", key_encoding="binary")
        assert sub.strip_prefix(sub.prefix_key(b"\xfe\x00")) == b"\xfe\x00"


class TestSiblingIsolation:
    @pytest.mark.parametrize("a,b", [("items", "items2"), ("a", "ab"), ("x", "")])
    def test_no_prefix_overlap(self, a, b):
        db = Level()
        ns_a, ns_b = sublevel(db, a), sublevel(db, b)
        for key in ["", "foo", "\x00items2/", "/"]:
            ka = ns_a.prefix_key(key)
            for other in ["", "foo", "2/\x01foo"]:
                kb = ns_b.prefix_key(other)
                assert not ka.startswith(kb)
                assert not kb.startswith(ka)

    def test_sibling_keys_outside_range(self):
        db = Level()
        items, items2 = sublevel(db, "items"), sublevel(db, "items2")
        rng = items.prefix_range()
        key = items2.prefix_key("foo")
        assert not rng.start <= key <= rng.end

    def test_child_keys_outside_parent_range(self):
        db = Level()
        items = sublevel(db, "items")
        posts = items.sublevel("posts")
        rng = items.prefix_range()
        for key in ["", "foo", "\xff"]:
            assert not rng.start <= posts.prefix_key(key) <= rng.end


class TestPrefixRange:
    @pytest.fixture
    def items(self):
        return sublevel(Level(), "items")

    def test_both(self, items):
        assert items.prefix_range(KeyRange("foo", "foz")) == KeyRange(
            b"\x00items/\x01foo", b"\x00items/\x01foz"
        )

    def test_end_omitted(self, items):
        assert items.prefix_range(KeyRange(start="foo")) == KeyRange(
            b"\x00items/\x01foo", b"\x00items/\x01\xff"
        )

    def test_start_omitted(self, items):
        assert items.prefix_range(KeyRange(end="foz")) == KeyRange(
            b"\x00items/\x01", b"\x00items/\x01foz"
        )

    def test_both_omitted(self, items):
        expected = KeyRange(b"\x00items/\x01", b"\x00items/\x01\xff")
        assert items.prefix_range(KeyRange()) == expected
        assert items.prefix_range() == expected

    def test_reverse_passes_through(self, items):
        rng = items.prefix_range(KeyRange("a", "b", reverse=True, limit=3))
        assert rng.reverse is True
        assert rng.limit == 3
        assert rng.start < rng.end

    def test_pure_form(self):
        rng = keyspace.prefix_range(b"\x00p/", KeyRange(), None, b"z")
        assert rng == KeyRange(b"\x00p/\x01", b"\x00p/\x01z")
