from ipaddress import IPv4Address, IPv6Address

import pytest
from hypothesis import given
from hypothesis import strategies as st

from trackerkit.bencode import bencode
from trackerkit.common import InfoHash, ResponsePeer
from trackerkit.response import (
    AnnounceResponse,
    FailureResponse,
    ResponseParseError,
    ScrapeResponse,
    ScrapeStatistics,
    parse_response,
)
from trackerkit.urlcodec import encode_peers_ipv4, encode_peers_ipv6

usizes = st.integers(min_value=0, max_value=2**64 - 1)
ports = st.integers(min_value=0, max_value=0xFFFF)
peers_v4 = st.lists(st.builds(ResponsePeer, st.ip_addresses(v=4), ports), max_size=10)
peers_v6 = st.lists(st.builds(ResponsePeer, st.ip_addresses(v=6), ports), max_size=10)

announce_responses = st.builds(
    AnnounceResponse,
    announce_interval=usizes,
    complete=usizes,
    incomplete=usizes,
    peers=peers_v4,
    peers6=peers_v6,
    warning_message=st.none() | st.text(),
)

scrape_responses = st.builds(
    ScrapeResponse,
    files=st.dictionaries(
        st.binary(min_size=20, max_size=20).map(InfoHash),
        st.builds(ScrapeStatistics, complete=usizes, incomplete=usizes, downloaded=st.just(0)),
        max_size=8,
    ),
)


def _announce_reference(response):
    mapping = {
        "interval": response.announce_interval,
        "complete": response.complete,
        "incomplete": response.incomplete,
        "peers": encode_peers_ipv4(response.peers),
        "peers6": encode_peers_ipv6(response.peers6),
    }
    if response.warning_message is not None:
        mapping["warning message"] = response.warning_message
    return bencode(mapping)


@given(announce_responses)
def test_announce_response_to_bytes(response):
    assert response.to_bytes() == _announce_reference(response)


@given(scrape_responses)
def test_scrape_response_to_bytes(response):
    reference = bencode(
        {
            "files": {
                bytes(info_hash): {
                    "complete": stats.complete,
                    "incomplete": stats.incomplete,
                    "downloaded": stats.downloaded,
                }
                for info_hash, stats in response.files.items()
            }
        }
    )
    assert response.to_bytes() == reference


@given(st.text())
def test_failure_response_to_bytes(reason):
    response = FailureResponse(reason)
    assert response.to_bytes() == bencode({"failure reason": reason})


@given(announce_responses)
def test_announce_round_trip(response):
    assert parse_response(response.to_bytes()) == response


@given(scrape_responses)
def test_scrape_round_trip(response):
    assert parse_response(response.to_bytes()) == response


@given(st.text())
def test_failure_round_trip(reason):
    assert parse_response(FailureResponse(reason).to_bytes()) == FailureResponse(reason)


def test_announce_exact_bytes():
    response = AnnounceResponse(announce_interval=120, complete=100, incomplete=500)
    assert response.to_bytes() == (
        b"d8:completei100e10:incompletei500e8:intervali120e5:peers0:6:peers60:e"
    )


def test_failure_exact_bytes():
    assert FailureResponse("x").to_bytes() == b"d14:failure reason1:xe"


def test_scrape_exact_bytes():
    info_hash = InfoHash(b"a" * 20)
    response = ScrapeResponse({info_hash: ScrapeStatistics(3, 4, 9)})
    assert response.to_bytes() == (
        b"d5:filesd20:" + b"a" * 20
        + b"d8:completei3e10:downloadedi0e10:incompletei4eeee"
    )


def test_announce_with_hundred_peers():
    peers = [ResponsePeer(IPv4Address(f"127.0.0.{i}"), i) for i in range(100)]
    response = AnnounceResponse(
        announce_interval=120, complete=100, incomplete=500, peers=peers
    )
    data = response.to_bytes()
    assert b"5:peers600:" in data
    assert len(data) < 4096
    parsed = parse_response(data)
    assert parsed.peers == tuple(peers)
    assert parsed.peers[5].ip_address == IPv4Address("127.0.0.5")


def test_parse_defaults_missing_peer_lists():
    parsed = parse_response(b"d8:completei1e10:incompletei2e8:intervali3ee")
    assert parsed == AnnounceResponse(announce_interval=3, complete=1, incomplete=2)


def test_parse_ipv6_peer():
    peer = ResponsePeer(IPv6Address("::1"), 6881)
    parsed = parse_response(AnnounceResponse(1, 2, 3, peers6=[peer]).to_bytes())
    assert parsed.peers6 == (peer,)


def test_parse_trailing_peer_bytes_falls_through_to_error():
    with pytest.raises(ResponseParseError):
        parse_response(b"d8:completei1e10:incompletei2e8:intervali3e5:peers5:abcdee")


def test_parse_invalid_bencode():
    with pytest.raises(ResponseParseError):
        parse_response(b"d8:complete")


def test_parse_empty_dictionary():
    with pytest.raises(ResponseParseError):
        parse_response(b"de")


def test_parse_non_dictionary():
    with pytest.raises(ResponseParseError):
        parse_response(b"i5e")


def test_parse_bad_info_hash_length():
    with pytest.raises(ResponseParseError):
        parse_response(b"d5:filesd3:abcd8:completei1e10:downloadedi0e10:incompletei1eeee")