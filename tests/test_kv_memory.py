"""Tests for the Memory ordered KV store."""

import threading

import pytest

from sublevel.kv.memory import Memory


class TestMemoryBasic:
    def test_set_get(self):
        m = Memory()
        m.set(b"k", b"v")
        assert m.get(b"k") == b"v"

    def test_get_missing(self):
        m = Memory()
        assert m.get(b"nope") is None

    def test_contains(self):
        m = Memory()
        m.set(b"k", b"v")
        assert b"k" in m
        assert b"nope" not in m

    def test_overwrite(self):
        m = Memory()
        m.set(b"k", b"old")
        m.set(b"k", b"new")
        assert m.get(b"k") == b"new"
        assert list(m.scan()) == [(b"k", b"new")]

    def test_type_error_on_non_bytes(self):
        m = Memory()
        with pytest.raises(TypeError, match="Expected bytes"):
            m.set(b"k", "not bytes")  # type: ignore

    def test_clear(self):
        m = Memory()
        m.set(b"a", b"1")
        m.set(b"b", b"2")
        m.clear()
        assert m.get(b"a") is None
        assert list(m.scan()) == []


class TestMemoryRemove:
    def test_remove(self):
        m = Memory()
        m.set(b"k", b"v")
        m.remove(b"k")
        assert m.get(b"k") is None
        assert list(m.scan()) == []

    def test_remove_missing(self):
        m = Memory()
        m.remove(b"nope")  # should not raise

    def test_remove_empty_value(self):
        m = Memory()
        m.set(b"k", b"")
        m.remove(b"k")
        assert list(m.scan()) == []


class TestMemoryScan:
    @pytest.fixture
    def m(self):
        m = Memory()
        for k in (b"c", b"a", b"e", b"b", b"d"):
            m.set(k, k.upper())
        return m

    def test_sorted(self, m):
        assert [k for k, _ in m.scan()] == [b"a", b"b", b"c", b"d", b"e"]

    def test_reverse(self, m):
        assert [k for k, _ in m.scan(reverse=True)] == [b"e", b"d", b"c", b"b", b"a"]

    def test_inclusive_bounds(self, m):
        assert [k for k, _ in m.scan(b"b", b"d")] == [b"b", b"c", b"d"]

    def test_bounds_between_keys(self, m):
        assert [k for k, _ in m.scan(b"bb", b"cc")] == [b"c"]

    def test_open_bounds(self, m):
        assert [k for k, _ in m.scan(upper=b"b")] == [b"a", b"b"]
        assert [k for k, _ in m.scan(lower=b"d")] == [b"d", b"e"]

    def test_reverse_with_bounds(self, m):
        assert [k for k, _ in m.scan(b"b", b"d", reverse=True)] == [b"d", b"c", b"b"]

    def test_byte_order(self):
        m = Memory()
        m.set(b"\x01", b"1")
        m.set(b"\x00\xff", b"2")
        m.set(b"\xff", b"3")
        assert [k for k, _ in m.scan()] == [b"\x00\xff", b"\x01", b"\xff"]


class TestMemoryApply:
    def test_apply_in_order(self):
        m = Memory()
        m.apply([
            ("put", b"a", b"1"),
            ("put", b"b", b"2"),
            ("del", b"a", None),
        ])
        assert list(m.scan()) == [(b"b", b"2")]

    def test_apply_is_all_or_nothing(self):
        m = Memory()
        with pytest.raises(TypeError):
            m.apply([("put", b"a", b"1"), ("put", b"b", "nope")])  # type: ignore
        assert m.get(b"a") is None

    def test_concurrent_writers(self):
        m = Memory()

        def writer(n):
            for i in range(100):
                m.set(f"{n}-{i:03d}".encode(), b"x")

        threads = [threading.Thread(target=writer, args=(i,)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        keys = [k for k, _ in m.scan()]
        assert len(keys) == 400
        assert keys == sorted(keys)
