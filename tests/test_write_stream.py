"""Tests for write streams."""

import pytest

from sublevel import Entry, Level, Operation, ValidationError, WriteError, sublevel


@pytest.fixture
def db():
    db = Level()
    yield db
    db.close()


class TestLevelWriteStream:
    def test_end_flushes(self, db):
        ws = db.create_write_stream()
        ws.write({"key": "a", "value": "1"})
        assert list(db.create_read_stream()) == []
        ws.end()
        assert ws.closed
        assert list(db.create_read_stream()) == [("a", "1")]

    def test_buffer_size_flushes(self, db):
        ws = db.create_write_stream(buffer_size=2)
        ws.write(("a", "1"))
        ws.write(Entry("b", "2"))
        assert ws.written == 2
        assert list(db.create_key_stream()) == ["a", "b"]
        ws.end()

    def test_delete_records(self, db):
        db.put("a", "1")
        with db.create_write_stream() as ws:
            ws.write(Operation("del", "a"))
            ws.write({"type": "put", "key": "b", "value": "2"})
        assert list(db.create_read_stream()) == [("b", "2")]

    def test_write_after_end(self, db):
        ws = db.create_write_stream()
        ws.end({"key": "a", "value": "1"})
        with pytest.raises(WriteError, match="after end"):
            ws.write({"key": "b", "value": "2"})

    def test_destroy_on_error(self, db):
        with pytest.raises(RuntimeError):
            with db.create_write_stream() as ws:
                ws.write({"key": "a", "value": "1"})
                raise RuntimeError("boom")
        assert ws.closed
        assert list(db.create_read_stream()) == []

    def test_bad_record(self, db):
        ws = db.create_write_stream()
        with pytest.raises(ValidationError):
            ws.write("nope")

    def test_bad_buffer_size(self, db):
        with pytest.raises(ValueError, match="buffer_size"):
            db.create_write_stream(buffer_size=0)


class TestSublevelWriteStream:
    def test_write_stream(self, db):
        sub = sublevel(db, "items")
        ws = sub.create_write_stream()
        ws.end({"key": "foo", "value": "bar"})
        assert ws.closed
        assert list(sub.create_read_stream()) == [("foo", "bar")]

    def test_write_stream_deep(self, db):
        sub2 = sublevel(sublevel(db, "items"), "items")
        ws = sub2.create_write_stream()
        ws.end({"key": "foo", "value": "bar"})
        assert list(sub2.create_read_stream()) == [("foo", "bar")]
        assert db.get(b"\x00items/\x00items/\x01foo") == "bar"

    def test_keys_prefixed_before_store(self, db):
        sub = sublevel(db, "items")
        with sub.create_write_stream() as ws:
            ws.write({"key": "foo", "value": "bar"})
            ws.write({"type": "del", "key": "foo"})
            ws.write({"key": "foz", "value": "baz"})
        assert list(db.create_key_stream(options={"key_encoding": "binary"})) == [
            b"\x00items/\x01foz",
        ]

    def test_uses_sublevel_options(self, db):
        sub = sublevel(db, "items", value_encoding="json")
        with sub.create_write_stream() as ws:
            ws.write(("foo", {"a": 1}))
        assert sub.get("foo") == {"a": 1}
