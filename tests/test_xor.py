import pytest

from wave_sim.utils.xor import xor_buffer_text, xor_buffers, xor_texts


@pytest.mark.parametrize(
    "a, b",
    [
        (b"hahale()11*#&*&*", b"wowowowowowowowo"),
        (bytes(range(256)), bytes(reversed(range(256)))),
        (b"", b""),
    ],
)
def test_xor_is_self_inverse(a, b):
    size = len(a)
    combined = xor_buffers(a, b, size, bytearray(size))

    assert xor_buffers(combined, b, size, bytearray(size)) == bytearray(a)


def test_xor_is_commutative():
    a, b = b"\x01\x02\xff", b"\x10\x20\x0f"

    assert xor_buffers(a, b, 3, bytearray(3)) == xor_buffers(b, a, 3, bytearray(3))
    assert xor_buffers(a, b, 3, bytearray(3)) == bytearray(b"\x11\x22\xf0")


def test_xor_fills_caller_buffer_in_place():
    out = bytearray(4)
    result = xor_buffers(b"\x0f\x0f", b"\xf0\x0f", 2, out)

    assert result is out
    assert out == bytearray(b"\xff\x00\x00\x00")


def test_xor_texts_size_is_longest_plus_terminator():
    result = xor_texts("hahale()11*#&*&*", "wowo")

    assert len(result) == len("hahale()11*#&*&*") + 1
    assert len(xor_texts("", "")) == 1


def test_xor_texts_keeps_each_terminator():
    result = xor_texts("ab", "a")

    # "ab\0" ^ "a\0\0"
    assert result == bytearray([0, ord("b"), 0])


def test_xor_texts_then_buffer_text_recovers_first_text():
    a, b = "hahale()11*#&*&*", "wowo"
    size = max(len(a), len(b)) + 1
    combined = xor_texts(a, b, bytearray(size))
    recovered = xor_buffer_text(combined, b, size, bytearray(size))

    assert recovered == bytearray(a.encode() + b"\0")


def test_xor_buffer_text_truncates_long_text():
    result = xor_buffer_text(bytes(3), "abcdef", 3, bytearray(3))

    assert result == bytearray(b"abc")


def test_xor_buffer_text_pads_short_text():
    result = xor_buffer_text(b"\x01\x01\x01\x01", "a", 4, bytearray(4))

    assert result == bytearray([ord("a") ^ 1, 1, 1, 1])


def test_short_output_buffer_is_rejected():
    with pytest.raises(ValueError):
        xor_texts("abc", "d", bytearray(2))
    with pytest.raises(ValueError):
        xor_buffers(b"ab", b"a", 2, bytearray(2))
