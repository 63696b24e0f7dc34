# image_resize/streams.py
"""
Byte plumbing between the main decoder and the metadata extractor.

DuplicatingReader wraps the source file for Pillow. Every byte it hands out
for the first time is copied to a sink (a PipeBuffer read by the extractor
thread), so the extractor never touches the file itself. Bytes read before a
sink is attached (the header) are retained and flushed on `attach`.

PipeBuffer is an in-memory, seekable byte stream written by one thread and
read by another. Writes never block.
"""

from __future__ import annotations
import io
import threading
from typing import BinaryIO, Optional

from .errors import ResourceLimitError


class PipeBuffer:
    def __init__(self) -> None:
        self._buf = bytearray()
        self._pos = 0
        self._eof = False
        self._discard = False
        self._cond = threading.Condition()

    # writer side

    def write(self, data: bytes) -> int:
        with self._cond:
            if not self._discard and not self._eof:
                self._buf += data
                self._cond.notify_all()
        return len(data)

    def close_writer(self) -> None:
        with self._cond:
            self._eof = True
            self._cond.notify_all()

    # reader side

    def _wait_for(self, end: int) -> None:
        while len(self._buf) < end and not self._eof:
            self._cond.wait()

    def read(self, size: Optional[int] = -1) -> bytes:
        with self._cond:
            if size is None or size < 0:
                while not self._eof:
                    self._cond.wait()
                end = len(self._buf)
            else:
                self._wait_for(self._pos + size)
                end = min(self._pos + size, len(self._buf))
            data = bytes(self._buf[self._pos:end])
            self._pos = max(self._pos, end)
            return data

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        with self._cond:
            if whence == io.SEEK_SET:
                target = offset
            elif whence == io.SEEK_CUR:
                target = self._pos + offset
            elif whence == io.SEEK_END:
                while not self._eof:
                    self._cond.wait()
                target = len(self._buf) + offset
            else:
                raise ValueError(f"invalid whence {whence}")
            if target < 0:
                raise ValueError(f"negative seek position {target}")
            self._pos = target
            return self._pos

    def tell(self) -> int:
        return self._pos

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def drain(self) -> None:
        """Drop everything buffered, ignore further writes, wait for the writer's EOF."""
        with self._cond:
            self._discard = True
            self._buf = bytearray()
            self._pos = 0
            while not self._eof:
                self._cond.wait()


class DuplicatingReader:
    """Read-only, seekable view of `raw` that caps and duplicates consumed bytes.

    Raises ResourceLimitError once more than `limit` distinct bytes have been
    consumed from the source.
    """

    def __init__(self, raw: BinaryIO, limit: int) -> None:
        self._raw = raw
        self._limit = limit
        self._pos = 0
        self._high = 0  # high-water mark: bytes [0, _high) were already seen
        self._sink: Optional[PipeBuffer] = None
        self._head: Optional[bytearray] = bytearray()

    @property
    def consumed(self) -> int:
        return self._high

    def attach(self, sink: Optional[PipeBuffer]) -> None:
        """Start forwarding to `sink`, flushing the retained header bytes first.

        Passing None just stops retaining bytes.
        """
        head, self._head = self._head, None
        if sink is not None:
            if head:
                sink.write(bytes(head))
            self._sink = sink

    def _forward(self, fresh: bytes) -> None:
        if not fresh:
            return
        if self._sink is not None:
            self._sink.write(fresh)
        elif self._head is not None:
            self._head += fresh

    def read(self, size: Optional[int] = -1) -> bytes:
        if size is None or size < 0:
            # never pull more than one byte past the cap into memory
            size = max(self._limit - self._pos + 1, 0)
        data = self._raw.read(size)
        end = self._pos + len(data)
        if end > self._high:
            fresh = data[max(self._high - self._pos, 0):]
            self._high = end
            if self._high > self._limit:
                raise ResourceLimitError(f"input exceeds {self._limit} bytes")
            self._forward(fresh)
        self._pos = end
        return data

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._pos = self._raw.seek(offset, whence)
        return self._pos

    def tell(self) -> int:
        return self._pos

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True
