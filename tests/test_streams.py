"""Tests for the duplicating reader and the in-memory pipe."""

import io
import threading

import pytest

from image_resize.errors import ResourceLimitError
from image_resize.streams import DuplicatingReader, PipeBuffer

PAYLOAD = bytes(range(256)) * 8


def test_header_bytes_flushed_on_attach():
    reader = DuplicatingReader(io.BytesIO(PAYLOAD), limit=len(PAYLOAD))
    head = reader.read(100)
    sink = PipeBuffer()
    reader.attach(sink)
    rest = reader.read()
    sink.close_writer()

    assert head + rest == PAYLOAD
    assert sink.read() == PAYLOAD


def test_seek_back_does_not_duplicate_bytes():
    reader = DuplicatingReader(io.BytesIO(PAYLOAD), limit=len(PAYLOAD))
    sink = PipeBuffer()
    reader.attach(sink)
    reader.read(16)
    reader.seek(0)
    reader.read(64)
    reader.seek(8)
    reader.read(8)
    sink.close_writer()

    assert reader.consumed == 64
    assert sink.read() == PAYLOAD[:64]


def test_attach_none_stops_retaining():
    reader = DuplicatingReader(io.BytesIO(PAYLOAD), limit=len(PAYLOAD))
    reader.read(10)
    reader.attach(None)
    assert reader.read(10) == PAYLOAD[10:20]
    assert reader.tell() == 20


def test_byte_ceiling_enforced():
    reader = DuplicatingReader(io.BytesIO(PAYLOAD), limit=1000)
    reader.read(1000)
    with pytest.raises(ResourceLimitError):
        reader.read(1)


def test_read_all_stops_past_ceiling():
    reader = DuplicatingReader(io.BytesIO(PAYLOAD), limit=100)
    with pytest.raises(ResourceLimitError):
        reader.read()


def test_pipe_read_blocks_until_writer_delivers():
    pipe = PipeBuffer()
    got = []

    def consume():
        got.append(pipe.read(6))

    t = threading.Thread(target=consume)
    t.start()
    pipe.write(b"abc")
    pipe.write(b"def")
    t.join(timeout=5)

    assert got == [b"abcdef"]


def test_pipe_short_read_at_eof():
    pipe = PipeBuffer()
    pipe.write(b"xy")
    pipe.close_writer()
    assert pipe.read(10) == b"xy"
    assert pipe.read(10) == b""


def test_pipe_seek_and_tell():
    pipe = PipeBuffer()
    pipe.write(b"0123456789")
    assert pipe.read(4) == b"0123"
    pipe.seek(2)
    assert pipe.tell() == 2
    assert pipe.read(3) == b"234"
    pipe.seek(-1, io.SEEK_CUR)
    assert pipe.read(1) == b"4"


def test_drain_discards_and_returns_at_eof():
    pipe = PipeBuffer()
    pipe.write(b"abc")
    done = threading.Event()

    def drain():
        pipe.drain()
        done.set()

    t = threading.Thread(target=drain, daemon=True)
    t.start()
    pipe.write(b"more bytes that nobody reads")
    assert not done.wait(timeout=0.1)
    pipe.close_writer()
    assert done.wait(timeout=5)
    assert pipe.read() == b""
