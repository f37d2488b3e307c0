import pytest

from binstream.binary.buffer import ByteBuffer, EncodeError, InsufficientData, StringTooLong


def test_prefixed_roundtrip_all_lengths():
    buf = ByteBuffer()
    payloads = [bytes((i * 7 + j) & 0xFF for j in range(i)) for i in range(256)]
    for p in payloads:
        buf.write_str(p)
    assert len(buf) == sum(1 + len(p) for p in payloads)
    for p in payloads:
        assert buf.read_str_bytes() == p
    assert buf.remaining == 0


def test_wire_layout():
    buf = ByteBuffer()
    buf.write_str("abc")
    assert buf.get_buffer() == b"\x03abc"
    assert buf.hexdump() == "03 61 62 63 "


def test_text_roundtrip_utf8():
    buf = ByteBuffer()
    buf.write_str("héllo")
    assert buf.get_buffer()[0] == len("héllo".encode("utf-8"))
    assert buf.read_str() == "héllo"


def test_arbitrary_bytes_survive_str_decoding():
    raw = bytes(range(0x80, 0x90))
    buf = ByteBuffer()
    buf.write_str(raw)
    text = buf.read_str()
    again = ByteBuffer()
    again.write_str(text)
    assert again.get_buffer() == b"\x10" + raw


def test_configured_encoding():
    buf = ByteBuffer(encoding="latin-1")
    buf.write_str("é")
    assert buf.get_buffer() == b"\x01\xe9"
    assert buf.read_str() == "é"


def test_too_long_rejected_without_touching_stream():
    buf = ByteBuffer()
    buf.write_u8(0x42)
    with pytest.raises(StringTooLong):
        buf.write_str(b"x" * 256)
    with pytest.raises(EncodeError):
        buf.write_str("é" * 128)  # 256 bytes once encoded
    assert buf.get_buffer() == b"\x42"
    buf.write_str(b"x" * 255)
    assert len(buf) == 1 + 1 + 255


def test_explicit_length_without_prefix():
    buf = ByteBuffer(b"hello world")
    assert buf.read_str(5, length_prefixed=False) == "hello"
    assert buf.get_read_offset() == 5


def test_explicit_length_skips_prefix():
    buf = ByteBuffer()
    buf.write_str("hello")
    # length is authoritative, the prefix byte is only skipped
    assert buf.read_str(3) == "hel"
    assert buf.get_read_offset() == 4


def test_explicit_length_overrun_raises_and_rewinds():
    buf = ByteBuffer()
    buf.write_str("hi")
    with pytest.raises(InsufficientData) as exc:
        buf.read_str(10)
    assert buf.get_read_offset() == 0
    assert exc.value.needed == 11
    with pytest.raises(InsufficientData):
        buf.read_str(4, length_prefixed=False)
    assert buf.get_read_offset() == 0


def test_prefixed_overrun_raises_and_rewinds():
    buf = ByteBuffer(b"\x05ab")
    with pytest.raises(InsufficientData):
        buf.read_str()
    assert buf.get_read_offset() == 0
    with pytest.raises(InsufficientData):
        ByteBuffer().read_str()


def test_zero_policy_yields_empty():
    buf = ByteBuffer(b"\x05ab", on_short_read="zero")
    assert buf.read_str() == ""
    assert buf.read_str_bytes() == b""
    assert buf.get_read_offset() == 0
    assert ByteBuffer(on_short_read="zero").read_str() == ""


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        ByteBuffer(b"\x00").read_str(-1)


def test_empty_string():
    buf = ByteBuffer()
    buf.write_str("")
    assert buf.get_buffer() == b"\x00"
    assert buf.read_str() == ""
    assert buf.get_read_offset() == 1


def test_undecodable_payload_restores_offset():
    buf = ByteBuffer(b"\x01a", encoding="utf-16")
    with pytest.raises(UnicodeDecodeError):
        buf.read_str()
    assert buf.get_read_offset() == 0
    assert buf.read_str_bytes() == b"a"


def test_utf16_text_roundtrip():
    buf = ByteBuffer(encoding="utf-16-le")
    buf.write_str("hi")
    assert buf.get_buffer() == b"\x04h\x00i\x00"
    assert buf.read_str() == "hi"
