"""Tracker responses: announce, scrape and failure, in bencoded form."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from .bencode import BencodeError, bdecode
from .common import InfoHash, ResponsePeer
from .urlcodec import (
    decode_peers_ipv4,
    decode_peers_ipv6,
    encode_peers_ipv4,
    encode_peers_ipv6,
)

_USIZE_MAX = 0xFFFF_FFFF_FFFF_FFFF


class ResponseParseError(ValueError):
    """Raised when bytes do not hold a valid tracker response."""


def _length_prefixed(raw: bytes) -> bytes:
    return b"%d:" % len(raw) + raw


@dataclass(frozen=True)
class ScrapeStatistics:
    """Seeder, leecher and download counts for one torrent."""

    complete: int
    incomplete: int
    downloaded: int = 0


@dataclass(frozen=True)
class AnnounceResponse:
    """The answer to an announce request."""

    announce_interval: int
    complete: int
    incomplete: int
    peers: tuple[ResponsePeer, ...] = ()
    peers6: tuple[ResponsePeer, ...] = ()
    warning_message: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "peers", tuple(self.peers))
        object.__setattr__(self, "peers6", tuple(self.peers6))

    def to_bytes(self) -> bytes:
        """Bencode the response with compact peer lists."""
        out = bytearray(b"d8:completei%de" % self.complete)
        out += b"10:incompletei%de" % self.incomplete
        out += b"8:intervali%de" % self.announce_interval
        out += b"5:peers" + _length_prefixed(encode_peers_ipv4(self.peers))
        out += b"6:peers6" + _length_prefixed(encode_peers_ipv6(self.peers6))
        if self.warning_message is not None:
            out += b"15:warning message"
            out += _length_prefixed(self.warning_message.encode("utf-8"))
        out += b"e"
        return bytes(out)


@dataclass
class ScrapeResponse:
    """Statistics for each torrent asked about in a scrape request."""

    files: dict[InfoHash, ScrapeStatistics] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.files = dict(self.files)

    def to_bytes(self) -> bytes:
        """Bencode the response; torrents are written in info hash order."""
        out = bytearray(b"d5:filesd")
        for info_hash in sorted(self.files):
            statistics = self.files[info_hash]
            out += b"20:" + bytes(info_hash)
            out += b"d8:completei%de" % statistics.complete
            out += b"10:downloadedi0e"
            out += b"10:incompletei%de" % statistics.incomplete
            out += b"e"
        out += b"ee"
        return bytes(out)


@dataclass(frozen=True)
class FailureResponse:
    """A response that carries only a reason for failing."""

    failure_reason: str

    def to_bytes(self) -> bytes:
        """Bencode the response."""
        reason = self.failure_reason.encode("utf-8")
        return b"d14:failure reason" + _length_prefixed(reason) + b"e"


Response = AnnounceResponse | ScrapeResponse | FailureResponse


def _field(mapping: dict, name: str) -> Any:
    try:
        return mapping[name.encode("ascii")]
    except KeyError:
        raise ResponseParseError(f"missing field {name!r}") from None


def _usize(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ResponseParseError(f"field {name!r} is not an integer")
    if not 0 <= value <= _USIZE_MAX:
        raise ResponseParseError(f"field {name!r} out of range")
    return value


def _text(value: Any, name: str) -> str:
    if not isinstance(value, bytes):
        raise ResponseParseError(f"field {name!r} is not a string")
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError as err:
        raise ResponseParseError(f"field {name!r} is not valid UTF-8") from err


def _peer_list(
    mapping: dict, name: str, decode: Callable[[bytes], list[ResponsePeer]]
) -> Iterable[ResponsePeer]:
    raw = mapping.get(name.encode("ascii"))
    if raw is None:
        return ()
    if not isinstance(raw, bytes):
        raise ResponseParseError(f"field {name!r} is not a byte string")
    try:
        return decode(raw)
    except ValueError as err:
        raise ResponseParseError(f"field {name!r}: {err}") from err


def _announce(mapping: dict) -> AnnounceResponse:
    warning = mapping.get(b"warning message")
    return AnnounceResponse(
        announce_interval=_usize(_field(mapping, "interval"), "interval"),
        complete=_usize(_field(mapping, "complete"), "complete"),
        incomplete=_usize(_field(mapping, "incomplete"), "incomplete"),
        peers=_peer_list(mapping, "peers", decode_peers_ipv4),
        peers6=_peer_list(mapping, "peers6", decode_peers_ipv6),
        warning_message=None if warning is None else _text(warning, "warning message"),
    )


def _scrape(mapping: dict) -> ScrapeResponse:
    files = _field(mapping, "files")
    if not isinstance(files, dict):
        raise ResponseParseError("field 'files' is not a dictionary")
    result = {}
    for key, entry in files.items():
        if len(key) != 20:
            raise ResponseParseError("not 20 bytes")
        if not isinstance(entry, dict):
            raise ResponseParseError("scrape statistics are not a dictionary")
        result[InfoHash(key)] = ScrapeStatistics(
            complete=_usize(_field(entry, "complete"), "complete"),
            incomplete=_usize(_field(entry, "incomplete"), "incomplete"),
            downloaded=_usize(_field(entry, "downloaded"), "downloaded"),
        )
    return ScrapeResponse(result)


def _failure(mapping: dict) -> FailureResponse:
    return FailureResponse(_text(_field(mapping, "failure reason"), "failure reason"))


def parse_response(data: bytes | bytearray | memoryview) -> Response:
    """Decode a bencoded response, trying announce, scrape, then failure."""
    try:
        decoded = bdecode(bytes(data))
    except BencodeError as err:
        raise ResponseParseError(str(err)) from err
    if not isinstance(decoded, dict):
        raise ResponseParseError("response is not a dictionary")
    for variant in (_announce, _scrape, _failure):
        try:
            return variant(decoded)
        except ResponseParseError:
            continue
    raise ResponseParseError("data did not match any variant of Response")