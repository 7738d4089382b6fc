"""
Bit-level writer and reader over byte streams.

Layout on disk:
  - data bytes: bits packed MSB-first, last byte zero-padded
  - one trailer byte: number of valid bits (1..8) in the last data byte
An empty bit sequence is stored as zero bytes (no trailer).
"""

from __future__ import annotations

import logging
from os import PathLike
from typing import BinaryIO, Union

from errors import MalformedStreamError

logger = logging.getLogger(__name__)

Sink = Union[str, PathLike, BinaryIO]


class BitWriter:
    """Buffers single bits and writes them out a byte at a time.

    `sink` is a path (opened here and closed on close()) or an open binary
    stream (flushed on close() but left open for the caller).
    """

    def __init__(self, sink: Sink):
        if isinstance(sink, (str, PathLike)):
            self._stream = open(sink, "wb")
            self._owns_stream = True
        else:
            self._stream = sink
            self._owns_stream = False
        self._acc = 0 # bits waiting to be written, right-aligned
        self._acc_bits = 0
        self._bytes_written = 0
        self._closed = False

    @property
    def bits_written(self) -> int:
        return self._bytes_written * 8 + self._acc_bits

    @property
    def closed(self) -> bool:
        return self._closed

    def write_bit(self, bit: bool) -> None:
        if self._closed:
            raise ValueError("write to closed BitWriter")
        self._acc = (self._acc << 1) | (1 if bit else 0)
        self._acc_bits += 1
        if self._acc_bits == 8:
            self._stream.write(bytes([self._acc]))
            self._bytes_written += 1
            self._acc = 0
            self._acc_bits = 0

    def write_bits(self, code: str) -> None:
        """Write a string of '0'/'1' characters in order."""
        for ch in code:
            if ch == "1":
                self.write_bit(True)
            elif ch == "0":
                self.write_bit(False)
            else:
                raise ValueError(f"invalid bit character {ch!r}")

    def close(self) -> None:
        """Flush the partial byte and the trailer, then release the sink."""
        if self._closed:
            return
        self._closed = True
        try:
            if self._acc_bits:
                valid = self._acc_bits
                self._stream.write(bytes([(self._acc << (8 - valid)) & 0xFF, valid]))
                self._bytes_written += 1
                logger.debug("flushed partial byte with %d valid bits", valid)
            elif self._bytes_written:
                self._stream.write(bytes([8]))
            self._stream.flush()
        finally:
            if self._owns_stream:
                self._stream.close()

    def __enter__(self) -> "BitWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class BitReader:
    """Returns bits in the order a BitWriter wrote them.

    Keeps one byte of lookahead beyond the current byte so the trailer can be
    recognised: the final byte of the stream is never handed out as data.
    """

    def __init__(self, source: Sink):
        if isinstance(source, (str, PathLike)):
            self._stream = open(source, "rb")
            self._owns_stream = True
        else:
            self._stream = source
            self._owns_stream = False
        self._byte = 0
        self._pos = 0 # next bit index within self._byte
        self._limit = 0 # valid bits in self._byte
        self._bits_read = 0
        self._closed = False
        self._lookahead = bytearray(self._stream.read(2))
        if len(self._lookahead) == 1:
            self.close()
            raise MalformedStreamError("bitstream is a single byte with no data", 0)

    @property
    def bits_read(self) -> int:
        return self._bits_read

    def _advance(self) -> bool:
        if len(self._lookahead) < 2:
            return False
        self._byte = self._lookahead.pop(0)
        self._pos = 0
        following = self._stream.read(1)
        if following:
            self._lookahead += following
            self._limit = 8
        else:
            valid = self._lookahead.pop()
            if not 1 <= valid <= 8:
                raise MalformedStreamError(
                    f"bad trailer byte {valid}, expected 1..8", self._bits_read
                )
            self._limit = valid
        return True

    def has_next(self) -> bool:
        if self._closed:
            return False
        if self._pos < self._limit:
            return True
        return self._advance()

    def read_bit(self) -> bool:
        if not self.has_next():
            raise MalformedStreamError("read past end of bitstream", self._bits_read)
        bit = (self._byte >> (7 - self._pos)) & 1
        self._pos += 1
        self._bits_read += 1
        return bit == 1

    def __iter__(self):
        while self.has_next():
            yield self.read_bit()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_stream:
            self._stream.close()

    def __enter__(self) -> "BitReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
