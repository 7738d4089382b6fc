"""
File-level compress / decompress built on the Huffman core.

The compressed file holds only the bitstream (see bitio); the code tree is
kept by the caller and passed back in to decompress.
"""

from __future__ import annotations

import io
import logging
from typing import Dict, Iterable

from bitio import BitReader, BitWriter
from huffman import HuffmanNode, huffman_decode, huffman_encode

logger = logging.getLogger(__name__)


def freq_table(symbols: Iterable) -> Dict[object, int]:
    ft: Dict[object, int] = {}
    for s in symbols:
        ft[s] = ft.get(s, 0) + 1
    return ft


def iter_chars(f, chunk_size: int = 64 * 1024):
    while True:
        chunk = f.read(chunk_size)
        if not chunk:
            return
        yield from chunk


def count_frequencies(path, encoding: str = "utf-8") -> Dict[str, int]:
    """
    Count how many times each character appears in the text file at path.
    OSError (missing file, read fault) propagates to the caller.
    """
    with open(path, "r", encoding=encoding, newline="") as f:
        ft = freq_table(iter_chars(f))
    logger.debug("counted %d distinct characters in %s", len(ft), path)
    return ft


def compress_text(symbols: Iterable, code_map: Dict[object, str]) -> bytes:
    buf = io.BytesIO()
    huffman_encode(symbols, code_map, BitWriter(buf))
    return buf.getvalue()


def decompress_bytes(blob: bytes, root: HuffmanNode | None) -> str:
    out = io.StringIO()
    with BitReader(io.BytesIO(blob)) as reader:
        huffman_decode(reader, root, out)
    return out.getvalue()


def compress_file(code_map: Dict[str, str], path, compressed_path, encoding: str = "utf-8") -> int:
    """
    Compress the text file at path into compressed_path using code_map.
    Returns the number of code bits written (padding and trailer excluded).
    """
    with open(path, "r", encoding=encoding, newline="") as f:
        with BitWriter(compressed_path) as writer:
            n_bits = huffman_encode(iter_chars(f), code_map, writer)
    logger.info("compressed %s -> %s (%d bits)", path, compressed_path, n_bits)
    return n_bits


def decompress_file(compressed_path, decompressed_path, root: HuffmanNode | None, encoding: str = "utf-8") -> int:
    """
    Decompress compressed_path into decompressed_path by walking root.
    Returns the number of characters written.
    """
    with BitReader(compressed_path) as reader:
        with open(decompressed_path, "w", encoding=encoding, newline="") as out:
            n_chars = huffman_decode(reader, root, out)
    logger.info("decompressed %s -> %s (%d chars)", compressed_path, decompressed_path, n_chars)
    return n_chars
