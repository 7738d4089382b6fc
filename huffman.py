import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import Optional

from bitio import BitReader, BitWriter
from errors import MalformedStreamError, UnknownSymbolError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HuffmanNode: # Node for Huffman tree, never mutated after build
    frequency: int
    symbol: object = None # None for internal nodes
    left: Optional["HuffmanNode"] = None
    right: Optional["HuffmanNode"] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


def build_huffman_tree(frequency_table): # frequency_table: dict of symbol -> frequency
    """
    Build the code tree by repeatedly merging the two lightest trees.
    Returns None for an empty table. Ties on frequency are broken by insertion
    order (table order for leaves, then creation order for merged nodes), so the
    same table always gives the same tree.
    """
    if not frequency_table:
        return None

    counter = itertools.count()
    priority_queue = []
    for symbol, frequency in frequency_table.items():
        if frequency < 1:
            raise ValueError(f"frequency for {symbol!r} must be >= 1, got {frequency}")
        priority_queue.append((frequency, next(counter), HuffmanNode(frequency, symbol)))
    heapq.heapify(priority_queue)

    # One symbol: wrap the leaf so it still gets the 1-bit code "0"
    if len(priority_queue) == 1:
        frequency, _, leaf = priority_queue[0]
        return HuffmanNode(frequency, None, leaf, None)

    while len(priority_queue) > 1:
        f1, _, left = heapq.heappop(priority_queue)
        f2, _, right = heapq.heappop(priority_queue)
        merged_node = HuffmanNode(f1 + f2, None, left, right) # internal node with combined frequency
        heapq.heappush(priority_queue, (merged_node.frequency, next(counter), merged_node))

    root = priority_queue[0][2]
    logger.debug("built tree over %d symbols, total frequency %d", len(frequency_table), root.frequency)
    return root


def generate_huffman_codes(root): # root: root of the Huffman tree, or None
    codes = {}

    def generate_codes_helper(node, current_code): # left appends '0', right appends '1'
        if node is None:
            return

        if node.is_leaf:
            codes[node.symbol] = current_code
            return

        generate_codes_helper(node.left, current_code + '0')
        generate_codes_helper(node.right, current_code + '1')

    generate_codes_helper(root, '')
    return codes # symbol -> code string


def huffman_encode(symbols, code_map: dict, writer: BitWriter) -> int:
    """
    Write the code of every symbol, in order, to writer.
    The writer is closed on every exit path. Returns the number of bits written.
    """
    try:
        for symbol in symbols:
            code = code_map.get(symbol)
            if code is None:
                raise UnknownSymbolError(symbol)
            writer.write_bits(code)
        return writer.bits_written
    finally:
        writer.close()


def huffman_decode(reader: BitReader, root, out) -> int:
    """
    Walk the tree one bit at a time, writing each symbol reached to out.write.
    Returns the number of symbols decoded.
    """
    if root is None:
        if reader.has_next():
            raise MalformedStreamError("bitstream is not empty but there is no code tree", 0)
        return 0

    decoded = 0
    current_node = root
    while reader.has_next():
        bit = reader.read_bit()
        current_node = current_node.right if bit else current_node.left
        if current_node is None:
            raise MalformedStreamError(
                f"bit {int(bit)} leads to a missing branch", reader.bits_read - 1
            )
        if current_node.is_leaf:
            out.write(current_node.symbol)
            decoded += 1
            current_node = root # reset to the root for the next symbol

    if current_node is not root:
        raise MalformedStreamError("bitstream ended in the middle of a code", reader.bits_read)
    return decoded
