from __future__ import annotations
import codecs
from pydantic import BaseModel, ConfigDict, field_validator
from .common import ByteOrder, ShortReadPolicy


class BufferOptions(BaseModel):
    """Defaults a ByteBuffer falls back on when a call does not say otherwise."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    byte_order: ByteOrder = ByteOrder.LITTLE
    on_short_read: ShortReadPolicy = ShortReadPolicy.RAISE
    encoding: str = "utf-8"

    @field_validator("byte_order", mode="before")
    @classmethod
    def _order(cls, v):
        return ByteOrder.coerce(v)

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, v: str) -> str:
        try:
            return codecs.lookup(v).name
        except LookupError as e:
            raise ValueError(f"unknown encoding {v!r}") from e
