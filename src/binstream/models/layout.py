from __future__ import annotations
import re
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from .common import ByteOrder

_SCALAR_KINDS = ("u8", "s8", "u16", "s16", "u32", "s32", "u64", "s64", "f32", "f64", "bool", "str")
# single-byte kinds and strings have no byte order to choose
_UNORDERED_KINDS = ("u8", "s8", "bool", "str")
_RAW_RE = re.compile(r"^bytes(?P<size>\d+)$")


class FieldSpec(BaseModel):
    name: str = Field(..., min_length=1)
    kind: str
    order: Optional[ByteOrder] = None  # None -> buffer default
    size: Optional[int] = Field(default=None, ge=0)  # only for raw "bytes" fields

    @field_validator("kind")
    @classmethod
    def _known_kind(cls, v: str) -> str:
        if v not in _SCALAR_KINDS and v != "bytes":
            raise ValueError(f"unknown field kind {v!r}")
        return v


def parse_field(token: str) -> FieldSpec:
    """
    Parse one ``name:kind`` token, e.g. ``length:u16be``, ``ratio:f32``,
    ``magic:bytes4``.
    """
    name, sep, kind = token.strip().partition(":")
    if not sep or not name or not kind:
        raise ValueError(f"bad field token {token!r}; expected name:kind")
    name, kind = name.strip(), kind.strip().lower()

    if kind in _SCALAR_KINDS:
        return FieldSpec(name=name, kind=kind)
    base, order = kind, None
    if kind[-2:] in ("le", "be"):
        base, order = kind[:-2], kind[-2:]
    if base.startswith("bytes"):
        if order:
            raise ValueError(f"raw field {token!r} has no byte order")
        m = _RAW_RE.match(base)
        if not m:
            raise ValueError(f"raw field {token!r} needs a size, e.g. bytes4")
        return FieldSpec(name=name, kind="bytes", size=int(m.group("size")))
    if base in _UNORDERED_KINDS:
        raise ValueError(f"kind {base!r} takes no byte order suffix")
    if base not in _SCALAR_KINDS:
        raise ValueError(f"unknown field kind {kind!r} in {token!r}")
    return FieldSpec(name=name, kind=base, order=ByteOrder.coerce(order))


def parse_fields(text: str) -> List[FieldSpec]:
    fields = [parse_field(tok) for tok in text.split(",") if tok.strip()]
    if not fields:
        raise ValueError("empty field list")
    names = [f.name for f in fields]
    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes:
        raise ValueError(f"duplicate field name(s): {', '.join(dupes)}")
    return fields
