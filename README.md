# trackerkit

A library for the BitTorrent HTTP tracker protocol:

- **Identifiers** (`trackerkit.common`): `InfoHash` and `PeerId` (20 bytes
  each), `AnnounceEvent` and `ResponsePeer`.
- **URL and peer list encoding** (`trackerkit.urlcodec`):
  `urlencode_20_bytes` / `urldecode_20_bytes` for the byte-by-byte percent
  encoding of info hashes and peer ids, and `encode_peers_ipv4`,
  `decode_peers_ipv4`, `encode_peers_ipv6`, `decode_peers_ipv6` for compact
  peer lists.
- **Bencoding** (`trackerkit.bencode`): `bencode`, `bdecode` and
  `BencodeError`.
- **Requests** (`trackerkit.request`): `AnnounceRequest` and `ScrapeRequest`
  with `parse_query_string` and `write_bytes`, plus `parse_bytes` and
  `parse_http_get_path`.
- **Responses** (`trackerkit.response`): `AnnounceResponse`,
  `ScrapeResponse` and `FailureResponse` with `to_bytes`, and
  `parse_response` to read them back.
- **Peer clients** (`trackerkit.peer_client`): `PeerClient` and `ClientKind`
  identify the client software and version behind a peer id.

It needs nothing outside the standard library.

## Installing

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Parsing a request

```python
from trackerkit.request import parse_bytes

raw = (
    b"GET /scrape?info_hash=%04%0bkV%3f%5cr%14%a6%b7%98%adC%c3%c9.%40%24%00%b9"
    b" HTTP/1.1\r\n\r\n"
)
request = parse_bytes(raw)
print(request.info_hashes)
```

`parse_bytes` returns `None` while the HTTP request headers are still
incomplete and raises `RequestParseError` for malformed input. Written
announce requests always ask for compact responses (`compact=1`).

## Writing and reading a response

```python
from trackerkit.response import FailureResponse, parse_response

data = FailureResponse("torrent not registered").to_bytes()
print(parse_response(data))
```

`parse_response` tries the announce, scrape and failure forms in that order
and raises `ResponseParseError` when none fits.

## Identifying a peer client

```python
from trackerkit.peer_client import PeerId

peer_id = PeerId(b"-DE123s-k/asdh3".ljust(20, b"\0"))
print(peer_id.client())   # Deluge 1.2.3 stable
```

## What it does not do

This package is a protocol library only. It has no tracker server, no
command-line program, no configuration file handling and no load-testing tool;
it neither opens network connections nor stores any state.