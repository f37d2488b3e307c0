from __future__ import annotations
from enum import Enum


class ByteOrder(str, Enum):
    LITTLE = "little"
    BIG = "big"

    @classmethod
    def coerce(cls, value: "ByteOrder | str") -> "ByteOrder":
        if isinstance(value, cls):
            return value
        v = str(value).lower()
        if v in ("<", "le"):
            return cls.LITTLE
        if v in (">", "be"):
            return cls.BIG
        return cls(v)


class ShortReadPolicy(str, Enum):
    RAISE = "raise"   # InsufficientData, cursor untouched
    ZERO = "zero"     # zero value of the type, cursor untouched
