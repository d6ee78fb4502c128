"""Identifying BitTorrent client software from peer ids."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

_AZ_RE = re.compile(rb"^-(?P<name>[a-zA-Z]{2})(?P<version>[0-9]{3}[0-9a-zA-Z])")
_MAINLINE_RE = re.compile(rb"^(?P<name>[a-zA-Z])(?P<version>[0-9\-]{6})-")
_PREFIX_RE = re.compile(rb"^(?P<prefix>[a-zA-Z0-9\-]+)-")

_PRERELEASE = {
    "d": " dev",
    "a": " alpha",
    "b": " beta",
    "r": " rc",
    "s": " stable",
}


class ClientKind(enum.Enum):
    """Known client families, plus catch-alls for unknown ones."""

    BIT_TORRENT = "BitTorrent"
    DELUGE = "Deluge"
    LIB_TORRENT_RAKSHASA = "lt (rakshasa)"
    LIB_TORRENT_RASTERBAR = "lt (rasterbar)"
    QBIT_TORRENT = "QBitTorrent"
    TRANSMISSION = "Transmission"
    UTORRENT = "µTorrent"
    UTORRENT_EMBEDDED = "µTorrent Emb."
    UTORRENT_MAC = "µTorrent Mac"
    UTORRENT_WEB = "µTorrent Web"
    VUZE = "Vuze"
    WEB_TORRENT = "WebTorrent"
    WEB_TORRENT_DESKTOP = "WebTorrent Desktop"
    MAINLINE = "Mainline"
    OTHER_WITH_PREFIX_AND_VERSION = "other-with-prefix-and-version"
    OTHER_WITH_PREFIX = "other-with-prefix"
    OTHER = "Other"


def _lossy(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def _three_digits_plus_prerelease(v1: str, v2: str, v3: str, v4: str) -> str:
    return f"{v1}.{v2}.{v3}{_PRERELEASE.get(v4.lower(), v4)}"


def _webtorrent(v1: str, v2: str, v3: str, v4: str) -> str:
    major = v2 if v1 == "0" else v1 + v2
    minor = v4 if v3 == "0" else v3 + v4
    return f"{major}.{minor}"


def _transmission(v1: str, v2: str, v3: str, v4: str) -> str:
    if (v1, v2) == ("0", "0"):
        return f"0.{v4}" if v3 == "0" else f"0.{v3}{v4}"
    return f"{v1}.{v2}{v3}"


_FOUR_CHAR_CLIENTS = {
    b"AZ": (ClientKind.VUZE, lambda a, b, c, d: f"{a}.{b}.{c}.{d}"),
    b"BT": (ClientKind.BIT_TORRENT, _three_digits_plus_prerelease),
    b"DE": (ClientKind.DELUGE, _three_digits_plus_prerelease),
    b"lt": (ClientKind.LIB_TORRENT_RAKSHASA, lambda a, b, c, d: f"{a}.{b}{c}.{d}"),
    b"LT": (ClientKind.LIB_TORRENT_RASTERBAR, lambda a, b, c, d: f"{a}.{b}{c}.{d}"),
    b"qB": (ClientKind.QBIT_TORRENT, lambda a, b, c, d: f"{a}.{b}.{c}"),
    b"TR": (ClientKind.TRANSMISSION, _transmission),
    b"UE": (ClientKind.UTORRENT_EMBEDDED, _three_digits_plus_prerelease),
    b"UM": (ClientKind.UTORRENT_MAC, _three_digits_plus_prerelease),
    b"UT": (ClientKind.UTORRENT, _three_digits_plus_prerelease),
    b"UW": (ClientKind.UTORRENT_WEB, _three_digits_plus_prerelease),
    b"WD": (ClientKind.WEB_TORRENT_DESKTOP, _webtorrent),
    b"WW": (ClientKind.WEB_TORRENT, _webtorrent),
}


@dataclass(frozen=True)
class PeerClient:
    """A client family with its version, or the prefix of an unknown one."""

    kind: ClientKind
    version: str | None = None
    prefix: str | None = None

    @classmethod
    def from_prefix_and_version(cls, prefix: bytes, version: bytes) -> PeerClient:
        """Interpret a client prefix and version taken from a peer id."""
        prefix = bytes(prefix)
        version = bytes(version)
        if len(version) == 4:
            chars = tuple(chr(b) for b in version)
            known = _FOUR_CHAR_CLIENTS.get(prefix)
            if known is not None:
                kind, render = known
                return cls(kind, render(*chars))
        elif prefix == b"M" and len(version) == 6:
            a, b, c, d, e, f = (chr(x) for x in version)
            if b == "-" and d == "-" and f == "-":
                return cls(ClientKind.MAINLINE, f"{a}.{c}.{e}")
            if b == "-" and e == "-":
                return cls(ClientKind.MAINLINE, f"{a}.{c}{d}.{f}")
        return cls(
            ClientKind.OTHER_WITH_PREFIX_AND_VERSION,
            version=_lossy(version),
            prefix=_lossy(prefix),
        )

    @classmethod
    def from_peer_id(cls, peer_id: PeerId | bytes) -> PeerClient:
        """Recognise the client that generated a peer id."""
        raw = bytes(peer_id)
        for pattern in (_AZ_RE, _MAINLINE_RE):
            match = pattern.match(raw)
            if match is not None:
                return cls.from_prefix_and_version(match["name"], match["version"])
        match = _PREFIX_RE.match(raw)
        if match is not None:
            return cls(ClientKind.OTHER_WITH_PREFIX, prefix=_lossy(match["prefix"]))
        return cls(ClientKind.OTHER)

    def __str__(self) -> str:
        if self.kind is ClientKind.OTHER_WITH_PREFIX_AND_VERSION:
            return f"Other ({self.prefix}) ({self.version})"
        if self.kind is ClientKind.OTHER_WITH_PREFIX:
            return f"Other ({self.prefix})"
        if self.kind is ClientKind.OTHER:
            return "Other"
        return f"{self.kind.value} {self.version}"


@dataclass(frozen=True, order=True)
class PeerId:
    """A 20-byte peer id, as seen by a tracker."""

    value: bytes

    def __post_init__(self) -> None:
        data = bytes(self.value)
        if len(data) != 20:
            raise ValueError(f"PeerId must be 20 bytes, got {len(data)}")
        object.__setattr__(self, "value", data)

    def __bytes__(self) -> bytes:
        return self.value

    def client(self) -> PeerClient:
        """Return the client that generated this peer id."""
        return PeerClient.from_peer_id(self)

    def first_8_bytes_hex(self) -> str:
        """Return the first eight bytes as lowercase hexadecimal."""
        return self.value[:8].hex()