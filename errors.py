"""
Exception types raised by the Huffman coder.

I/O faults are not wrapped: opening or reading a missing file raises the
built-in OSError and is left to the caller.
"""


class HuffmanError(Exception):
    """Base class for coding errors (bad symbols, bad bitstreams)."""


class UnknownSymbolError(HuffmanError, KeyError):
    """Encoder met a symbol that has no code in the code map."""

    def __init__(self, symbol):
        super().__init__(symbol)
        self.symbol = symbol

    def __str__(self) -> str:
        return f"no Huffman code for symbol {self.symbol!r}"


class MalformedStreamError(HuffmanError):
    """Bitstream does not resolve to a valid path through the code tree."""

    def __init__(self, message: str, bit_offset: int = -1):
        super().__init__(message)
        self.bit_offset = bit_offset # -1 when the offset is unknown
