"""Announce and scrape requests: parsing from HTTP and writing to HTTP."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import quote, unquote_to_bytes

from .common import AnnounceEvent, InfoHash, PeerId
from .urlcodec import urldecode_20_bytes, urlencode_20_bytes

logger = logging.getLogger(__name__)

MAX_HEADERS = 16
MAX_KEY_LENGTH = 100
_U16_MAX = 0xFFFF
_USIZE_MAX = 0xFFFF_FFFF_FFFF_FFFF

_TCHAR_RUN = rb"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"
_REQUEST_LINE = re.compile(rb"(" + _TCHAR_RUN + rb") ([!-~\x80-\xff]+) HTTP/1\.[01]\Z")
_HEADER_LINE = re.compile(rb"(" + _TCHAR_RUN + rb"):[\t\x20-\x7e\x80-\xff]*\Z")
_UNSIGNED = re.compile(r"\+?[0-9]+\Z", re.ASCII)

_REQUEST_TAIL = b" HTTP/1.1\r\nHost: localhost\r\n\r\n"


class RequestParseError(ValueError):
    """Raised when a request cannot be parsed."""


def _parse_unsigned(value: str, maximum: int, what: str) -> int:
    if not _UNSIGNED.match(value):
        raise RequestParseError(f"parse {what}: invalid digit in {value!r}")
    number = int(value)
    if number > maximum:
        raise RequestParseError(f"parse {what}: number too large")
    return number


def _decode_20(value: str) -> bytes:
    try:
        return urldecode_20_bytes(value)
    except ValueError as err:
        raise RequestParseError(str(err)) from err


def _query_pairs(query_string: str):
    """Yield key/value pairs the way the tracker splits its query strings."""
    ampersands = (i for i, c in enumerate(query_string) if c == "&")
    equal_signs = (i for i, c in enumerate(query_string) if c == "=")
    length = len(query_string)
    position = 0
    for equal_index in equal_signs:
        segment_end = next(ampersands, length)
        if position > equal_index:
            raise RequestParseError(f"no key at {position}..{equal_index}")
        if equal_index + 1 > segment_end:
            raise RequestParseError(f"no value at {equal_index + 1}..{segment_end}")
        yield query_string[position:equal_index], query_string[equal_index + 1 : segment_end]
        if segment_end == length:
            break
        position = segment_end + 1


def _as_suffix(url_suffix: bytes | str) -> bytes:
    if isinstance(url_suffix, str):
        return url_suffix.encode("utf-8")
    return bytes(url_suffix)


@dataclass(frozen=True)
class AnnounceRequest:
    """A peer announcing itself for one torrent."""

    info_hash: InfoHash
    peer_id: PeerId
    port: int
    bytes_uploaded: int
    bytes_downloaded: int
    bytes_left: int
    event: AnnounceEvent = AnnounceEvent.EMPTY
    numwant: int | None = None
    key: str | None = None

    def write_bytes(self, url_suffix: bytes | str = b"") -> bytes:
        """Render the request as an HTTP GET request."""
        out = bytearray(b"GET /announce")
        out += _as_suffix(url_suffix)
        out += b"?info_hash=" + urlencode_20_bytes(bytes(self.info_hash))
        out += b"&peer_id=" + urlencode_20_bytes(bytes(self.peer_id))
        out += b"&port=%d" % self.port
        out += b"&uploaded=%d" % self.bytes_uploaded
        out += b"&downloaded=%d" % self.bytes_downloaded
        out += b"&left=%d" % self.bytes_left
        event = self.event.as_str()
        if event is not None:
            out += b"&event=" + event.encode("ascii")
        if self.numwant is not None:
            out += b"&numwant=%d" % self.numwant
        if self.key is not None:
            out += b"&key=" + quote(self.key, safe="").encode("ascii")
        # Compact responses are always requested.
        out += b"&compact=1"
        out += _REQUEST_TAIL
        return bytes(out)

    @classmethod
    def parse_query_string(cls, query_string: str) -> AnnounceRequest:
        """Parse the query string of an announce path."""
        info_hash = peer_id = port = None
        left = uploaded = downloaded = None
        event = AnnounceEvent.EMPTY
        numwant = None
        key = None

        for name, value in _query_pairs(query_string):
            if name == "info_hash":
                info_hash = InfoHash(_decode_20(value))
            elif name == "peer_id":
                peer_id = PeerId(_decode_20(value))
            elif name == "port":
                port = _parse_unsigned(value, _U16_MAX, "port")
            elif name == "left":
                left = _parse_unsigned(value, _USIZE_MAX, "left")
            elif name == "uploaded":
                uploaded = _parse_unsigned(value, _USIZE_MAX, "uploaded")
            elif name == "downloaded":
                downloaded = _parse_unsigned(value, _USIZE_MAX, "downloaded")
            elif name == "event":
                try:
                    event = AnnounceEvent.from_str(value)
                except ValueError as err:
                    raise RequestParseError(f"invalid event: {err}") from err
            elif name == "compact":
                if value != "1":
                    raise RequestParseError("compact set, but not to 1")
            elif name == "numwant":
                numwant = _parse_unsigned(value, _USIZE_MAX, "numwant")
            elif name == "key":
                if len(value.encode("utf-8")) > MAX_KEY_LENGTH:
                    raise RequestParseError("'key' is too long")
                try:
                    key = unquote_to_bytes(value).decode("utf-8")
                except UnicodeDecodeError as err:
                    raise RequestParseError(f"invalid key: {err}") from err
            else:
                logger.debug("ignored unrecognized key: %s", name)

        required = {
            "info_hash": info_hash,
            "peer_id": peer_id,
            "port": port,
            "uploaded": uploaded,
            "downloaded": downloaded,
            "left": left,
        }
        for name, found in required.items():
            if found is None:
                raise RequestParseError(f"no {name}")

        return cls(
            info_hash=info_hash,
            peer_id=peer_id,
            port=port,
            bytes_uploaded=uploaded,
            bytes_downloaded=downloaded,
            bytes_left=left,
            event=event,
            numwant=numwant,
            key=key,
        )


@dataclass(frozen=True)
class ScrapeRequest:
    """A request for statistics on one or more torrents."""

    info_hashes: tuple[InfoHash, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "info_hashes", tuple(self.info_hashes))

    def write_bytes(self, url_suffix: bytes | str = b"") -> bytes:
        """Render the request as an HTTP GET request."""
        out = bytearray(b"GET /scrape")
        out += _as_suffix(url_suffix)
        out += b"?"
        out += b"&".join(
            b"info_hash=" + urlencode_20_bytes(bytes(info_hash)) for info_hash in self.info_hashes
        )
        out += _REQUEST_TAIL
        return bytes(out)

    @classmethod
    def parse_query_string(cls, query_string: str) -> ScrapeRequest:
        """Parse the query string of a scrape path."""
        info_hashes = []
        for name, value in _query_pairs(query_string):
            if name == "info_hash":
                info_hashes.append(InfoHash(_decode_20(value)))
            else:
                logger.debug("ignored unrecognized key: %s", name)
        if not info_hashes:
            raise RequestParseError("No info hashes sent")
        return cls(tuple(info_hashes))


Request = AnnounceRequest | ScrapeRequest


def parse_http_get_path(path: str) -> AnnounceRequest | ScrapeRequest:
    """Parse a GET path such as ``/announce?info_hash=...``."""
    logger.debug("request GET path: %s", path)
    location, separator, query_string = path.partition("?")
    if not separator:
        raise RequestParseError("no query string")
    if location == "/announce":
        return AnnounceRequest.parse_query_string(query_string)
    if location == "/scrape":
        return ScrapeRequest.parse_query_string(query_string)
    raise RequestParseError("Path must be /announce or /scrape")


def _next_line(raw: bytes, pos: int) -> tuple[bytes, int] | None:
    end = raw.find(b"\n", pos)
    if end < 0:
        return None
    line = raw[pos:end]
    if line.endswith(b"\r"):
        line = line[:-1]
    return line, end + 1


def parse_bytes(data: bytes | bytearray | memoryview) -> AnnounceRequest | ScrapeRequest | None:
    """Parse a request from raw HTTP bytes; None if the headers are incomplete."""
    raw = bytes(data)
    pos = 0
    while True:
        if raw.startswith(b"\r\n", pos):
            pos += 2
        elif raw.startswith(b"\n", pos):
            pos += 1
        else:
            break

    step = _next_line(raw, pos)
    if step is None:
        return None
    request_line, pos = step
    match = _REQUEST_LINE.match(request_line)
    if match is None:
        raise RequestParseError("invalid HTTP request line")
    raw_path = match.group(2)

    header_count = 0
    while True:
        step = _next_line(raw, pos)
        if step is None:
            return None
        line, pos = step
        if not line:
            break
        if _HEADER_LINE.match(line) is None:
            raise RequestParseError("invalid HTTP header")
        header_count += 1
        if header_count > MAX_HEADERS:
            raise RequestParseError("too many headers")

    try:
        path = raw_path.decode("utf-8")
    except UnicodeDecodeError as err:
        raise RequestParseError("path is not valid UTF-8") from err
    return parse_http_get_path(path)