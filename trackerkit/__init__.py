"""BitTorrent HTTP tracker protocol: requests, responses, bencoding and peer client detection."""

__version__ = "0.1.0"