from __future__ import annotations

import logging
from typing import Optional, Union

from .codecs.numeric import bits_to_float, decode_int, encode_int, float_to_bits
from binstream.models.common import ByteOrder, ShortReadPolicy
from binstream.models.options import BufferOptions

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]
OrderLike = Union[ByteOrder, str, None]

# Length prefix is a single byte on the wire.
MAX_STR_LEN = 255


class InsufficientData(ValueError):
    """A read needed more bytes than remain after the read offset."""

    def __init__(self, needed: int, offset: int, available: int):
        super().__init__(f"need {needed} byte(s) at offset {offset}, only {available} available")
        self.needed = needed
        self.offset = offset
        self.available = available


class EncodeError(ValueError):
    pass


class StringTooLong(EncodeError):
    pass


def _check_int_width(width: int) -> None:
    if width < 1:
        raise ValueError(f"integer width must be at least 1, got {width}")


def _check_float_width(width: int) -> None:
    if width not in (4, 8):
        raise ValueError(f"float width must be 4 or 8, got {width}")


class ByteBuffer:
    """
    Growable byte sequence with a read cursor.

    Writes always append. Reads consume from ``read_offset`` and either advance
    by the decoded width or, when too few bytes remain, follow the buffer's
    short-read policy without moving the cursor. Byte order is chosen per call;
    ``options.byte_order`` (little-endian unless configured) fills in when a
    call passes none.
    """

    __slots__ = ("_buf", "_pos", "options")

    def __init__(
        self,
        data: Optional[BytesLike] = None,
        options: Optional[BufferOptions] = None,
        **overrides,
    ):
        opts = options or BufferOptions()
        if overrides:
            opts = BufferOptions(**{**opts.model_dump(), **overrides})
        self.options = opts
        self._buf = bytearray(data) if data is not None else bytearray()
        self._pos = 0

    @classmethod
    def from_hex(cls, text: str, **kwargs) -> "ByteBuffer":
        """Build a buffer from a hex dump such as ``"34 12 12 34 "``."""
        return cls(bytes.fromhex(text), **kwargs)

    # -----------------------------
    # State
    # -----------------------------

    def __len__(self) -> int: return len(self._buf)
    def __bytes__(self) -> bytes: return bytes(self._buf)

    def __eq__(self, other) -> bool:
        if isinstance(other, ByteBuffer):
            return self._buf == other._buf
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self._buf == other
        return NotImplemented

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return f"ByteBuffer(len={len(self._buf)}, read_offset={self._pos})"

    @property
    def remaining(self) -> int: return len(self._buf) - self._pos

    @property
    def write_offset(self) -> int:
        # Writes only ever append, so the write cursor is the stored length.
        return len(self._buf)

    @property
    def read_offset(self) -> int: return self._pos

    @read_offset.setter
    def read_offset(self, pos: int) -> None: self.set_read_offset(pos)

    def get_read_offset(self) -> int: return self._pos

    def set_read_offset(self, pos: int) -> None:
        if not (0 <= pos <= len(self._buf)):
            raise ValueError(f"read offset {pos} out of bounds (0..{len(self._buf)})")
        self._pos = pos

    @property
    def buffer(self) -> bytes: return bytes(self._buf)

    @buffer.setter
    def buffer(self, data: BytesLike) -> None: self.set_buffer(data)

    def get_buffer(self) -> bytes: return bytes(self._buf)

    def set_buffer(self, data: BytesLike) -> None:
        """Replace the backing bytes wholesale; the read offset restarts at 0."""
        self._buf = bytearray(data)
        self._pos = 0
        logger.debug("buffer replaced (%d bytes)", len(self._buf))

    def clear(self) -> None:
        self._buf.clear()
        self._pos = 0

    def hexdump(self, order: OrderLike = ByteOrder.LITTLE) -> str:
        """Two lower-case hex digits per byte, each followed by a space.

        Little-endian renders the stored order, big-endian renders it reversed.
        Cursors are not touched.
        """
        data = self._buf if ByteOrder.coerce(order) is ByteOrder.LITTLE else reversed(self._buf)
        return "".join(f"{b:02x} " for b in data)

    def byte_str(self, le: bool = True) -> str:
        return self.hexdump(ByteOrder.LITTLE if le else ByteOrder.BIG)

    # -----------------------------
    # Helpers
    # -----------------------------

    def _order(self, order: OrderLike) -> str:
        return ByteOrder.coerce(order if order is not None else self.options.byte_order).value

    def _short(self, needed: int, default):
        if self.options.on_short_read is ShortReadPolicy.RAISE:
            raise InsufficientData(needed, self._pos, self.remaining)
        logger.debug(
            "short read: need %d at %d, have %d; returning %r", needed, self._pos, self.remaining, default
        )
        return default

    def _take(self, n: int) -> Optional[bytes]:
        if n < 0:
            raise ValueError("negative length")
        end = self._pos + n
        if end > len(self._buf):
            return None
        out = bytes(self._buf[self._pos:end])
        self._pos = end
        return out

    # -----------------------------
    # Writing
    # -----------------------------

    def write_int(self, value: int, width: int, *, signed: bool = False, order: OrderLike = None) -> None:
        _check_int_width(width)
        try:
            raw = encode_int(value, width, signed, self._order(order))
        except OverflowError as e:
            raise EncodeError(str(e)) from e
        self._buf += raw

    def write_float(self, value: float, width: int, *, order: OrderLike = None) -> None:
        _check_float_width(width)
        try:
            bits = float_to_bits(value, width)
        except OverflowError as e:
            raise EncodeError(f"{value!r} does not fit in f{8 * width}") from e
        self.write_int(bits, width, order=order)

    def write_bytes(self, data: BytesLike, length: Optional[int] = None) -> None:
        """Append raw bytes; with ``length`` only the first ``length`` bytes of ``data``."""
        if length is not None:
            if not (0 <= length <= len(data)):
                raise ValueError(f"length {length} outside data of {len(data)} bytes")
            data = data[:length]
        self._buf += data

    def write_bool(self, v: bool) -> None: self._buf.append(1 if v else 0)

    def write_str(self, value: Union[str, BytesLike]) -> None:
        """One length byte (0..255) followed by the raw payload."""
        if isinstance(value, str):
            payload = value.encode(self.options.encoding, errors="surrogateescape")
        else:
            payload = bytes(value)
        if len(payload) > MAX_STR_LEN:
            raise StringTooLong(f"string payload is {len(payload)} bytes, limit is {MAX_STR_LEN}")
        self._buf.append(len(payload))
        self._buf += payload

    def write_u8(self, v: int) -> None: self.write_int(v, 1)
    def write_s8(self, v: int) -> None: self.write_int(v, 1, signed=True)
    def write_u16(self, v: int, order: OrderLike = None) -> None: self.write_int(v, 2, order=order)
    def write_s16(self, v: int, order: OrderLike = None) -> None: self.write_int(v, 2, signed=True, order=order)
    def write_u32(self, v: int, order: OrderLike = None) -> None: self.write_int(v, 4, order=order)
    def write_s32(self, v: int, order: OrderLike = None) -> None: self.write_int(v, 4, signed=True, order=order)
    def write_u64(self, v: int, order: OrderLike = None) -> None: self.write_int(v, 8, order=order)
    def write_s64(self, v: int, order: OrderLike = None) -> None: self.write_int(v, 8, signed=True, order=order)
    def write_f32(self, v: float, order: OrderLike = None) -> None: self.write_float(v, 4, order=order)
    def write_f64(self, v: float, order: OrderLike = None) -> None: self.write_float(v, 8, order=order)

    def write_u16_le(self, v: int) -> None: self.write_u16(v, ByteOrder.LITTLE)
    def write_u16_be(self, v: int) -> None: self.write_u16(v, ByteOrder.BIG)
    def write_s16_le(self, v: int) -> None: self.write_s16(v, ByteOrder.LITTLE)
    def write_s16_be(self, v: int) -> None: self.write_s16(v, ByteOrder.BIG)
    def write_u32_le(self, v: int) -> None: self.write_u32(v, ByteOrder.LITTLE)
    def write_u32_be(self, v: int) -> None: self.write_u32(v, ByteOrder.BIG)
    def write_s32_le(self, v: int) -> None: self.write_s32(v, ByteOrder.LITTLE)
    def write_s32_be(self, v: int) -> None: self.write_s32(v, ByteOrder.BIG)
    def write_u64_le(self, v: int) -> None: self.write_u64(v, ByteOrder.LITTLE)
    def write_u64_be(self, v: int) -> None: self.write_u64(v, ByteOrder.BIG)
    def write_s64_le(self, v: int) -> None: self.write_s64(v, ByteOrder.LITTLE)
    def write_s64_be(self, v: int) -> None: self.write_s64(v, ByteOrder.BIG)
    def write_f32_le(self, v: float) -> None: self.write_f32(v, ByteOrder.LITTLE)
    def write_f32_be(self, v: float) -> None: self.write_f32(v, ByteOrder.BIG)
    def write_f64_le(self, v: float) -> None: self.write_f64(v, ByteOrder.LITTLE)
    def write_f64_be(self, v: float) -> None: self.write_f64(v, ByteOrder.BIG)

    # -----------------------------
    # Reading
    # -----------------------------

    def read_int(self, width: int, *, signed: bool = False, order: OrderLike = None) -> int:
        _check_int_width(width)
        order = self._order(order)
        raw = self._take(width)
        if raw is None:
            return self._short(width, 0)
        return decode_int(raw, signed, order)

    def read_float(self, width: int, *, order: OrderLike = None) -> float:
        _check_float_width(width)
        order = self._order(order)
        raw = self._take(width)
        if raw is None:
            return self._short(width, 0.0)
        return bits_to_float(decode_int(raw, False, order), width)

    def read_bool(self) -> bool:
        # Any nonzero byte reads as True; writes only ever emit 0 or 1.
        raw = self._take(1)
        if raw is None:
            return self._short(1, False)
        return raw[0] != 0

    def read_bytes(self, n: int) -> bytes:
        if n < 0:
            raise ValueError("negative length")
        raw = self._take(n)
        if raw is None:
            return self._short(n, b"")
        return raw

    def peek(self, n: int) -> bytes:
        """Like read_bytes but leaves the read offset where it is."""
        if n < 0:
            raise ValueError("negative length")
        if self._pos + n > len(self._buf):
            return self._short(n, b"")
        return bytes(self._buf[self._pos:self._pos + n])

    def read_str_bytes(self, length: Optional[int] = None, length_prefixed: bool = True) -> bytes:
        """
        Read a string payload as raw bytes.

        Without ``length`` the 1-byte prefix supplies it. With ``length`` the
        caller's value is authoritative; ``length_prefixed`` then says whether
        a prefix byte still sits in front of the payload and must be skipped.
        A short payload restores the read offset to where the call started.
        """
        if length is not None and length < 0:
            raise ValueError("negative length")
        start = self._pos
        if length is None or length_prefixed:
            prefix = self._take(1)
            if prefix is None:
                return self._short(1, b"")
            if length is None:
                length = prefix[0]
        payload = self._take(length)
        if payload is None:
            needed = self._pos - start + length
            self._pos = start
            return self._short(needed, b"")
        return payload

    def read_str(self, length: Optional[int] = None, length_prefixed: bool = True) -> str:
        """Like read_str_bytes, decoded with ``options.encoding``.

        A payload the codec cannot decode raises UnicodeDecodeError and the
        read offset goes back to where the call started.
        """
        start = self._pos
        raw = self.read_str_bytes(length, length_prefixed)
        try:
            return raw.decode(self.options.encoding, errors="surrogateescape")
        except UnicodeDecodeError:
            self._pos = start
            raise

    def read_u8(self) -> int: return self.read_int(1)
    def read_s8(self) -> int: return self.read_int(1, signed=True)
    def read_u16(self, order: OrderLike = None) -> int: return self.read_int(2, order=order)
    def read_s16(self, order: OrderLike = None) -> int: return self.read_int(2, signed=True, order=order)
    def read_u32(self, order: OrderLike = None) -> int: return self.read_int(4, order=order)
    def read_s32(self, order: OrderLike = None) -> int: return self.read_int(4, signed=True, order=order)
    def read_u64(self, order: OrderLike = None) -> int: return self.read_int(8, order=order)
    def read_s64(self, order: OrderLike = None) -> int: return self.read_int(8, signed=True, order=order)
    def read_f32(self, order: OrderLike = None) -> float:
        """Signalling NaNs come back quieted (0x7F800001 reads as 0x7FC00001 once
        written again); every other float32 bit pattern round-trips exactly."""
        return self.read_float(4, order=order)

    def read_f64(self, order: OrderLike = None) -> float: return self.read_float(8, order=order)

    def read_u16_le(self) -> int: return self.read_u16(ByteOrder.LITTLE)
    def read_u16_be(self) -> int: return self.read_u16(ByteOrder.BIG)
    def read_s16_le(self) -> int: return self.read_s16(ByteOrder.LITTLE)
    def read_s16_be(self) -> int: return self.read_s16(ByteOrder.BIG)
    def read_u32_le(self) -> int: return self.read_u32(ByteOrder.LITTLE)
    def read_u32_be(self) -> int: return self.read_u32(ByteOrder.BIG)
    def read_s32_le(self) -> int: return self.read_s32(ByteOrder.LITTLE)
    def read_s32_be(self) -> int: return self.read_s32(ByteOrder.BIG)
    def read_u64_le(self) -> int: return self.read_u64(ByteOrder.LITTLE)
    def read_u64_be(self) -> int: return self.read_u64(ByteOrder.BIG)
    def read_s64_le(self) -> int: return self.read_s64(ByteOrder.LITTLE)
    def read_s64_be(self) -> int: return self.read_s64(ByteOrder.BIG)
    def read_f32_le(self) -> float: return self.read_f32(ByteOrder.LITTLE)
    def read_f32_be(self) -> float: return self.read_f32(ByteOrder.BIG)
    def read_f64_le(self) -> float: return self.read_f64(ByteOrder.LITTLE)
    def read_f64_be(self) -> float: return self.read_f64(ByteOrder.BIG)
