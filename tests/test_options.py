import pytest
from pydantic import ValidationError

from binstream.binary.buffer import ByteBuffer
from binstream.models.common import ByteOrder, ShortReadPolicy
from binstream.models.options import BufferOptions


def test_defaults():
    opts = BufferOptions()
    assert opts.byte_order is ByteOrder.LITTLE
    assert opts.on_short_read is ShortReadPolicy.RAISE
    assert opts.encoding == "utf-8"


@pytest.mark.parametrize("raw,expected", [
    ("little", ByteOrder.LITTLE), ("LE", ByteOrder.LITTLE), ("<", ByteOrder.LITTLE),
    ("big", ByteOrder.BIG), ("be", ByteOrder.BIG), (">", ByteOrder.BIG),
])
def test_byte_order_aliases(raw, expected):
    assert BufferOptions(byte_order=raw).byte_order is expected


def test_bad_values_rejected():
    with pytest.raises(ValidationError):
        BufferOptions(byte_order="middle")
    with pytest.raises(ValidationError):
        BufferOptions(on_short_read="ignore")
    with pytest.raises(ValidationError):
        BufferOptions(encoding="no-such-codec")


def test_frozen():
    opts = BufferOptions()
    with pytest.raises(ValidationError):
        opts.byte_order = ByteOrder.BIG


def test_buffer_uses_default_order_but_call_wins():
    buf = ByteBuffer(byte_order="big")
    buf.write_u16(0x0102)
    buf.write_u16(0x0102, "little")
    buf.write_u16_le(0x0102)
    assert buf.get_buffer() == b"\x01\x02\x02\x01\x02\x01"
    assert buf.read_u16() == 0x0102


def test_overrides_layer_on_options():
    base = BufferOptions(encoding="latin-1")
    buf = ByteBuffer(options=base, on_short_read="zero")
    assert buf.options.encoding == "iso8859-1"
    assert buf.options.on_short_read is ShortReadPolicy.ZERO
    assert base.on_short_read is ShortReadPolicy.RAISE


def test_unknown_override_rejected():
    with pytest.raises(ValidationError):
        ByteBuffer(on_short_raed="zero")
