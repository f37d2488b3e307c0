from __future__ import annotations
import operator
import struct
from dataclasses import dataclass
from typing import Dict

# IEEE-754 layouts; always packed big-endian here and reordered by the int codec.
_FLOAT_FMT = {4: ">f", 8: ">d"}


@dataclass(frozen=True)
class Kind:
    name: str
    width: int
    signed: bool = False
    is_float: bool = False
    is_bool: bool = False


KINDS: Dict[str, Kind] = {
    k.name: k
    for k in (
        Kind("u8", 1),
        Kind("s8", 1, signed=True),
        Kind("u16", 2),
        Kind("s16", 2, signed=True),
        Kind("u32", 4),
        Kind("s32", 4, signed=True),
        Kind("u64", 8),
        Kind("s64", 8, signed=True),
        Kind("f32", 4, is_float=True),
        Kind("f64", 8, is_float=True),
        Kind("bool", 1, is_bool=True),
    )
}


def int_range(width: int, signed: bool) -> tuple[int, int]:
    bits = 8 * width
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def encode_int(value: int, width: int, signed: bool, order: str) -> bytes:
    """Explicit byte-by-byte layout; raises OverflowError outside the range."""
    value = operator.index(value)
    lo, hi = int_range(width, signed)
    if not (lo <= value <= hi):
        raise OverflowError(f"{value} does not fit in {'s' if signed else 'u'}{8 * width}")
    return value.to_bytes(width, order, signed=signed)


def decode_int(raw: bytes, signed: bool, order: str) -> int:
    return int.from_bytes(raw, order, signed=signed)


def float_to_bits(value: float, width: int) -> int:
    return int.from_bytes(struct.pack(_FLOAT_FMT[width], value), "big")


def bits_to_float(bits: int, width: int) -> float:
    return struct.unpack(_FLOAT_FMT[width], bits.to_bytes(width, "big"))[0]
