from __future__ import annotations
import argparse, json, logging, sys
from pathlib import Path

from .binary.buffer import ByteBuffer
from .binary.layout import decode_record, encode_record, plan_from_text
from .models.common import ByteOrder, ShortReadPolicy
from .models.options import BufferOptions

logger = logging.getLogger(__name__)


class CliError(Exception):
    pass


def _load_bytes(path: str) -> bytes:
    p = Path(path)
    if not p.is_file():
        raise CliError(f"no such file: {path}")
    return p.read_bytes()


def _slice(data: bytes, offset: int, length: int | None) -> bytes:
    if offset < 0 or offset > len(data):
        raise CliError(f"offset {offset} outside file of {len(data)} bytes")
    if length is not None and length < 0:
        raise CliError(f"length must not be negative, got {length}")
    end = len(data) if length is None else offset + length
    return data[offset:end]


def _options(args) -> BufferOptions:
    return BufferOptions(
        byte_order=args.order,
        on_short_read=args.on_short_read,
        encoding=args.encoding,
    )


def _jsonable(value):
    if isinstance(value, bytes):
        return value.hex()
    return value


def cmd_dump(args):
    data = _slice(_load_bytes(args.input), args.offset, args.length)
    buf = ByteBuffer(data)
    order = ByteOrder.BIG if args.big_endian else ByteOrder.LITTLE
    print(buf.hexdump(order))
    logger.debug("dumped %d bytes from %s", len(buf), args.input)


def cmd_decode(args):
    plan = plan_from_text(args.fields)
    buf = ByteBuffer(_load_bytes(args.input), options=_options(args))
    buf.set_read_offset(args.offset)
    record = decode_record(buf, plan)
    out = {k: _jsonable(v) for k, v in record.items()}
    print(json.dumps(out, indent=2))
    if buf.remaining:
        print(f"Warning: {buf.remaining} trailing byte(s) after offset {buf.read_offset}", file=sys.stderr)


def cmd_encode(args):
    plan = plan_from_text(args.fields)
    try:
        values = json.loads(args.values)
    except json.JSONDecodeError as e:
        raise CliError(f"--values is not valid JSON: {e}") from e
    if not isinstance(values, dict):
        raise CliError("--values must be a JSON object")
    buf = ByteBuffer(options=_options(args))
    n = encode_record(buf, plan, values)
    with open(args.output, "wb") as out:
        out.write(bytes(buf))
    logger.debug("wrote %d bytes to %s", n, args.output)


def _add_codec_options(sp):
    sp.add_argument("--fields", required=True, help="comma-separated name:kind list, e.g. 'len:u16be,name:str'")
    sp.add_argument("--order", default="little", choices=[o.value for o in ByteOrder],
                    help="byte order for fields without an le/be suffix")
    sp.add_argument("--on-short-read", default="raise", choices=[p.value for p in ShortReadPolicy],
                    help="raise an error, or yield zero values, when the data runs out")
    sp.add_argument("--encoding", default="utf-8", help="text encoding for str fields")


def build_parser():
    p = argparse.ArgumentParser(prog="binstream", description="Byte buffer codec utilities")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("dump", help="print a hex dump of a file")
    sp.add_argument("input")
    sp.add_argument("--big-endian", action="store_true", help="render bytes in reverse order")
    sp.add_argument("--offset", type=int, default=0)
    sp.add_argument("--length", type=int, default=None)
    sp.set_defaults(func=cmd_dump)

    sp = sub.add_parser("decode", help="decode a record from a file and print it as JSON")
    sp.add_argument("input")
    sp.add_argument("--offset", type=int, default=0)
    _add_codec_options(sp)
    sp.set_defaults(func=cmd_decode)

    sp = sub.add_parser("encode", help="encode a JSON object into a binary file")
    sp.add_argument("output")
    sp.add_argument("--values", required=True, help="JSON object keyed by field name")
    _add_codec_options(sp)
    sp.set_defaults(func=cmd_encode)

    return p


def main(argv=None):
    p = build_parser()
    ns = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    try:
        ns.func(ns)
    except (CliError, OSError, TypeError, ValueError) as e:
        # InsufficientData, EncodeError, LayoutError and pydantic errors are ValueErrors
        print(f"error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
