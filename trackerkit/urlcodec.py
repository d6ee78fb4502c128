"""URL encoding of 20-byte identifiers and compact peer list encoding."""

from __future__ import annotations

from collections.abc import Iterable
from ipaddress import IPv4Address, IPv6Address

from .common import HASH_LENGTH, ResponsePeer

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_IPV4_ENTRY = 6
_IPV6_ENTRY = 18


def urlencode_20_bytes(data: bytes | bytearray | memoryview) -> bytes:
    """Percent-encode every one of 20 bytes, giving 60 ASCII bytes."""
    raw = bytes(data)
    if len(raw) != HASH_LENGTH:
        raise ValueError(f"expected {HASH_LENGTH} bytes, got {len(raw)}")
    return "".join(f"%{byte:02x}" for byte in raw).encode("ascii")


def urldecode_20_bytes(value: str) -> bytes:
    """Decode a query value holding exactly 20 bytes, escaped or literal."""
    chars = iter(value)
    out = bytearray()
    for _ in range(HASH_LENGTH):
        c = next(chars, None)
        if c is None:
            raise ValueError("less than 20 chars")
        if ord(c) > 0xFF:
            raise ValueError(f"character not in single byte range: {c!r}")
        if c == "%":
            first = next(chars, None)
            if first is None:
                raise ValueError("missing first urldecode char in pair")
            second = next(chars, None)
            if second is None:
                raise ValueError("missing second urldecode char in pair")
            if first not in _HEX_DIGITS or second not in _HEX_DIGITS:
                raise ValueError(f"hex decode error: {first + second!r}")
            out.append(int(first + second, 16))
        else:
            out.append(ord(c))
    if next(chars, None) is not None:
        raise ValueError("more than 20 chars")
    return bytes(out)


def _encode_peers(peers: Iterable[ResponsePeer], family: type) -> bytes:
    out = bytearray()
    for peer in peers:
        if not isinstance(peer.ip_address, family):
            raise ValueError(f"expected {family.__name__}, got {peer.ip_address!r}")
        out += peer.ip_address.packed
        out += peer.port.to_bytes(2, "big")
    return bytes(out)


def _decode_peers(data: bytes, family: type, entry_size: int) -> list[ResponsePeer]:
    raw = bytes(data)
    if len(raw) % entry_size:
        raise ValueError("trailing bytes")
    address_size = entry_size - 2
    return [
        ResponsePeer(
            family(raw[start : start + address_size]),
            int.from_bytes(raw[start + address_size : start + entry_size], "big"),
        )
        for start in range(0, len(raw), entry_size)
    ]


def encode_peers_ipv4(peers: Iterable[ResponsePeer]) -> bytes:
    """Pack IPv4 peers as 4 address bytes plus 2 port bytes each."""
    return _encode_peers(peers, IPv4Address)


def decode_peers_ipv4(data: bytes) -> list[ResponsePeer]:
    """Unpack a compact IPv4 peer list."""
    return _decode_peers(data, IPv4Address, _IPV4_ENTRY)


def encode_peers_ipv6(peers: Iterable[ResponsePeer]) -> bytes:
    """Pack IPv6 peers as 16 address bytes plus 2 port bytes each."""
    return _encode_peers(peers, IPv6Address)


def decode_peers_ipv6(data: bytes) -> list[ResponsePeer]:
    """Unpack a compact IPv6 peer list."""
    return _decode_peers(data, IPv6Address, _IPV6_ENTRY)