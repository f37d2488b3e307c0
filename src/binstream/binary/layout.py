from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, Mapping, Tuple

from .buffer import ByteBuffer, InsufficientData
from .codecs.numeric import KINDS
from binstream.models.layout import FieldSpec, parse_fields

# A plan is an ordered sequence of fields, decoded/encoded in on-wire order.
FieldPlan = Tuple[FieldSpec, ...]


class LayoutError(ValueError):
    pass


def plan_from_text(text: str) -> FieldPlan:
    try:
        return tuple(parse_fields(text))
    except ValueError as e:
        raise LayoutError(str(e)) from e


def _reader(spec: FieldSpec) -> Callable[[ByteBuffer], Any]:
    if spec.kind == "str":
        return lambda b: b.read_str()
    if spec.kind == "bytes":
        return lambda b: b.read_bytes(spec.size or 0)
    k = KINDS[spec.kind]
    if k.is_bool:
        return lambda b: b.read_bool()
    if k.is_float:
        return lambda b: b.read_float(k.width, order=spec.order)
    return lambda b: b.read_int(k.width, signed=k.signed, order=spec.order)


def _writer(spec: FieldSpec) -> Callable[[ByteBuffer, Any], None]:
    if spec.kind == "str":
        return lambda b, v: b.write_str(v)
    if spec.kind == "bytes":
        def write_raw(b: ByteBuffer, v) -> None:
            raw = bytes.fromhex(v) if isinstance(v, str) else bytes(v)
            if len(raw) != spec.size:
                raise LayoutError(f"field {spec.name!r} needs {spec.size} bytes, got {len(raw)}")
            b.write_bytes(raw)
        return write_raw
    k = KINDS[spec.kind]
    if k.is_bool:
        def write_flag(b: ByteBuffer, v) -> None:
            if not isinstance(v, int):
                raise LayoutError(f"field {spec.name!r} needs a bool or int, got {type(v).__name__}")
            b.write_bool(v)
        return write_flag
    if k.is_float:
        return lambda b, v: b.write_float(float(v), k.width, order=spec.order)
    return lambda b, v: b.write_int(v, k.width, signed=k.signed, order=spec.order)


def decode_record(buf: ByteBuffer, plan: Iterable[FieldSpec]) -> Dict[str, Any]:
    """
    Read each field of ``plan`` in order from ``buf``'s read offset.
    Short reads follow the buffer's policy; when a field raises (short
    read or undecodable text), the read offset is rewound to where the
    record started.
    """
    start = buf.read_offset
    out: Dict[str, Any] = {}
    try:
        for spec in plan:
            out[spec.name] = _reader(spec)(buf)
    except (InsufficientData, UnicodeDecodeError):
        buf.set_read_offset(start)
        raise
    return out


def encode_record(buf: ByteBuffer, plan: Iterable[FieldSpec], values: Mapping[str, Any]) -> int:
    """
    Append ``values`` laid out by ``plan``; returns the number of bytes written.
    Nothing is appended unless every field encodes.
    """
    plan = tuple(plan)
    missing = [s.name for s in plan if s.name not in values]
    if missing:
        raise LayoutError(f"missing value(s) for: {', '.join(missing)}")
    scratch = ByteBuffer(options=buf.options)
    for spec in plan:
        _writer(spec)(scratch, values[spec.name])
    buf.write_bytes(bytes(scratch))
    return len(scratch)
