"""Tests for the canonical form of sender and device identities."""

import ipaddress

import pytest

from telemetry.errors import MalformedEventError
from telemetry.identity import normalize_identity


@pytest.mark.parametrize(
    "raw",
    [
        "10.1.1.2",
        " 10.1.1.2\n",
        "10.1.1.2:49153",
        ("10.1.1.2", 49153),
        b"\x0a\x01\x01\x02",
        ipaddress.IPv4Address("10.1.1.2"),
    ],
)
def test_ipv4_spellings_collapse(raw) -> None:
    assert normalize_identity(raw) == "10.1.1.2"


def test_ipv6_is_compressed_and_port_stripped() -> None:
    assert normalize_identity("FE80:0:0:0:0:0:0:1") == "fe80::1"
    assert normalize_identity("[fe80::1]:9000") == "fe80::1"
    assert normalize_identity(bytes(15) + b"\x01") == "::1"


def test_mac_addresses_are_lowercase_colon_separated() -> None:
    assert normalize_identity("00-0A-95-9D-68-16") == "00:0a:95:9d:68:16"
    assert normalize_identity("00:0a:95:9D:68:16") == "00:0a:95:9d:68:16"


def test_other_values() -> None:
    assert normalize_identity(b"\x00\x01") == "0001"
    assert normalize_identity(7) == "7"
    assert normalize_identity("  Device1 ") == "device1"


@pytest.mark.parametrize("raw", [None, "", "   ", b"", (), True])
def test_missing_identity_is_malformed(raw) -> None:
    with pytest.raises(MalformedEventError):
        normalize_identity(raw)
