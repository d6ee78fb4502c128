"""Bencoding, the serialisation format of tracker responses."""

from __future__ import annotations

import re
from typing import Any

_INTEGER = re.compile(rb"-?(?:0|[1-9][0-9]*)\Z")
_LENGTH = re.compile(rb"(?:0|[1-9][0-9]*)\Z")


class BencodeError(ValueError):
    """Raised when a value cannot be encoded or input cannot be decoded."""


def bencode(value: Any) -> bytes:
    """Encode ints, bytes, str, lists, tuples and dicts; dict keys are sorted."""
    out = bytearray()
    _encode(value, out)
    return bytes(out)


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise BencodeError(f"dictionary key must be bytes or str, not {type(value).__name__}")


def _encode(value: Any, out: bytearray) -> None:
    if isinstance(value, bool):
        raise BencodeError("cannot encode bool")
    if isinstance(value, int):
        out += b"i%de" % value
    elif isinstance(value, (bytes, bytearray, memoryview, str)):
        raw = _as_bytes(value)
        out += b"%d:" % len(raw)
        out += raw
    elif isinstance(value, (list, tuple)):
        out += b"l"
        for item in value:
            _encode(item, out)
        out += b"e"
    elif isinstance(value, dict):
        items = {}
        for key, item in value.items():
            raw_key = _as_bytes(key)
            if raw_key in items:
                raise BencodeError(f"duplicate dictionary key: {raw_key!r}")
            items[raw_key] = item
        out += b"d"
        for raw_key in sorted(items):
            out += b"%d:" % len(raw_key)
            out += raw_key
            _encode(items[raw_key], out)
        out += b"e"
    else:
        raise BencodeError(f"cannot encode {type(value).__name__}")


def bdecode(data: bytes) -> Any:
    """Decode one bencoded value; strings come back as bytes, dict keys as bytes."""
    decoder = _Decoder(bytes(data))
    try:
        value = decoder.value()
    except RecursionError as err:
        raise BencodeError("nesting too deep") from err
    if decoder.pos != len(decoder.data):
        raise BencodeError(f"trailing data at offset {decoder.pos}")
    return value


class _Decoder:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    def _peek(self) -> int:
        if self.pos >= len(self.data):
            raise BencodeError("unexpected end of input")
        return self.data[self.pos]

    def _until(self, terminator: bytes) -> bytes:
        end = self.data.find(terminator, self.pos)
        if end < 0:
            raise BencodeError(f"missing {terminator!r} after offset {self.pos}")
        chunk = self.data[self.pos : end]
        self.pos = end + 1
        return chunk

    def value(self) -> Any:
        lead = self._peek()
        if lead == ord("i"):
            self.pos += 1
            digits = self._until(b"e")
            if not _INTEGER.match(digits) or digits == b"-0":
                raise BencodeError(f"invalid integer: {digits!r}")
            return int(digits)
        if lead == ord("l"):
            self.pos += 1
            items = []
            while self._peek() != ord("e"):
                items.append(self.value())
            self.pos += 1
            return items
        if lead == ord("d"):
            self.pos += 1
            result = {}
            while self._peek() != ord("e"):
                if not chr(self._peek()).isdigit():
                    raise BencodeError(f"dictionary key must be a string at offset {self.pos}")
                key = self.string()
                result[key] = self.value()
            self.pos += 1
            return result
        if chr(lead).isdigit():
            return self.string()
        raise BencodeError(f"unexpected byte {lead:#04x} at offset {self.pos}")

    def string(self) -> bytes:
        digits = self._until(b":")
        if not _LENGTH.match(digits):
            raise BencodeError(f"invalid string length: {digits!r}")
        length = int(digits)
        end = self.pos + length
        if end > len(self.data):
            raise BencodeError("string runs past end of input")
        chunk = self.data[self.pos : end]
        self.pos = end
        return chunk