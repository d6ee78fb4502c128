"""Identifiers and small value types shared by tracker requests and responses."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from ipaddress import IPv4Address, IPv6Address, ip_address

HASH_LENGTH = 20


def _twenty_bytes(kind: str, value: bytes | bytearray | memoryview) -> bytes:
    data = bytes(value)
    if len(data) != HASH_LENGTH:
        raise ValueError(f"{kind} must be {HASH_LENGTH} bytes, got {len(data)}")
    return data


@dataclass(frozen=True, order=True)
class InfoHash:
    """The 20-byte identifier of a torrent."""

    value: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _twenty_bytes("InfoHash", self.value))

    def __bytes__(self) -> bytes:
        return self.value


@dataclass(frozen=True)
class PeerId:
    """The 20-byte identifier a peer announces itself with."""

    value: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _twenty_bytes("PeerId", self.value))

    def __bytes__(self) -> bytes:
        return self.value


class AnnounceEvent(enum.Enum):
    """The ``event`` parameter of an announce request."""

    STARTED = "started"
    STOPPED = "stopped"
    COMPLETED = "completed"
    EMPTY = "empty"

    @classmethod
    def from_str(cls, value: str) -> AnnounceEvent:
        """Parse the textual form used in query strings."""
        for member in cls:
            if member.value == value:
                return member
        raise ValueError(f"Unknown value: {value}")

    def as_str(self) -> str | None:
        """Return the query-string form, or None for an empty event."""
        if self is AnnounceEvent.EMPTY:
            return None
        return self.value


@dataclass(frozen=True)
class ResponsePeer:
    """An address and port handed out in an announce response."""

    ip_address: IPv4Address | IPv6Address
    port: int

    def __post_init__(self) -> None:
        address = self.ip_address
        if isinstance(address, str):
            address = ip_address(address)
        if not isinstance(address, (IPv4Address, IPv6Address)):
            raise TypeError(f"not an IP address: {address!r}")
        object.__setattr__(self, "ip_address", address)
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port out of range: {self.port}")