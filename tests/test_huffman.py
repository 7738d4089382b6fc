import io
from itertools import combinations

import pytest

from bitio import BitReader, BitWriter
from errors import MalformedStreamError, UnknownSymbolError
from huffman import HuffmanNode, build_huffman_tree, generate_huffman_codes, huffman_decode, huffman_encode


def encode_bits(symbols, code_map) -> bytes:
    buf = io.BytesIO()
    huffman_encode(symbols, code_map, BitWriter(buf))
    return buf.getvalue()


def decode_bits(blob: bytes, root) -> str:
    out = io.StringIO()
    huffman_decode(BitReader(io.BytesIO(blob)), root, out)
    return out.getvalue()


def raw_bits(bits: str) -> bytes:
    buf = io.BytesIO()
    with BitWriter(buf) as w:
        w.write_bits(bits)
    return buf.getvalue()


FREQS = {'a': 5, 'b': 2, 'c': 1, 'd': 1}


def test_empty_table_gives_no_tree():
    assert build_huffman_tree({}) is None
    assert generate_huffman_codes(None) == {}


def test_single_symbol_is_wrapped():
    root = build_huffman_tree({'a': 5})
    assert root.frequency == 5
    assert root.symbol is None
    assert root.left == HuffmanNode(5, 'a')
    assert root.right is None
    assert generate_huffman_codes(root) == {'a': '0'}


def test_single_symbol_round_trip():
    root = build_huffman_tree({'a': 5})
    codes = generate_huffman_codes(root)
    blob = encode_bits("aaaaa", codes)
    assert blob == b"\x00\x05"
    assert decode_bits(blob, root) == "aaaaa"


def test_concrete_tree_shape_and_codes():
    root = build_huffman_tree(FREQS)
    assert root.frequency == 9
    codes = generate_huffman_codes(root)
    assert codes == {'a': '1', 'b': '00', 'c': '010', 'd': '011'}


def test_codes_are_prefix_free():
    codes = generate_huffman_codes(build_huffman_tree(FREQS))
    for x, y in combinations(codes.values(), 2):
        assert not x.startswith(y)
        assert not y.startswith(x)


def test_lower_frequency_never_gets_shorter_code():
    codes = generate_huffman_codes(build_huffman_tree(FREQS))
    for s, t in combinations(FREQS, 2):
        if FREQS[s] > FREQS[t]:
            assert len(codes[s]) <= len(codes[t])
        elif FREQS[s] < FREQS[t]:
            assert len(codes[s]) >= len(codes[t])


def test_every_internal_node_has_two_children():
    def check(node):
        if node.is_leaf:
            return 1
        assert node.left is not None and node.right is not None
        assert node.frequency == node.left.frequency + node.right.frequency
        return check(node.left) + check(node.right)

    assert check(build_huffman_tree(FREQS)) == len(FREQS)


def test_same_table_builds_same_codes():
    freqs = {c: 1 for c in "zyxwvutsrq"}
    assert generate_huffman_codes(build_huffman_tree(freqs)) == generate_huffman_codes(build_huffman_tree(dict(freqs)))


def test_zero_frequency_rejected():
    with pytest.raises(ValueError):
        build_huffman_tree({'a': 3, 'b': 0})


def test_encode_abcd_bit_layout_and_round_trip():
    root = build_huffman_tree(FREQS)
    codes = generate_huffman_codes(root)
    blob = encode_bits("abcd", codes)
    # 1 00 010 011 -> 10001001 1(0000000), 1 valid bit in the last byte
    assert blob == b"\x89\x80\x01"
    assert decode_bits(blob, root) == "abcd"


def test_round_trip_text():
    text = "she sells sea shells by the sea shore\n"
    freqs = {}
    for ch in text:
        freqs[ch] = freqs.get(ch, 0) + 1
    root = build_huffman_tree(freqs)
    assert decode_bits(encode_bits(text, generate_huffman_codes(root)), root) == text


def test_unknown_symbol_raises_and_closes_writer():
    codes = generate_huffman_codes(build_huffman_tree(FREQS))
    writer = BitWriter(io.BytesIO())
    with pytest.raises(UnknownSymbolError) as info:
        huffman_encode("abz", codes, writer)
    assert info.value.symbol == 'z'
    assert writer.closed


def test_one_bit_in_single_symbol_stream_is_malformed():
    root = build_huffman_tree({'a': 5})
    with pytest.raises(MalformedStreamError):
        decode_bits(raw_bits("001"), root)


def test_stream_ending_mid_code_is_malformed():
    root = build_huffman_tree(FREQS)
    with pytest.raises(MalformedStreamError) as info:
        decode_bits(raw_bits("101"), root)
    assert info.value.bit_offset == 3


def test_absent_tree_decodes_empty_stream_only():
    assert decode_bits(b"", None) == ""
    with pytest.raises(MalformedStreamError):
        decode_bits(raw_bits("0"), None)


def test_decode_returns_symbol_count():
    root = build_huffman_tree(FREQS)
    out = io.StringIO()
    n = huffman_decode(BitReader(io.BytesIO(b"\x89\x80\x01")), root, out)
    assert n == 4
