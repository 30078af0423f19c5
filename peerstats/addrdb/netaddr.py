"""
Typed network addresses as stored in peers.dat.

Addresses arrive either in the legacy 16-byte IPv6 form (IPv4 and Tor v2 are
embedded behind fixed prefixes) or in the BIP155 ``addrv2`` form, which tags
each address with a network id and an explicit length.
"""

from __future__ import annotations

import base64
import hashlib
import ipaddress
from dataclasses import dataclass
from enum import IntEnum

IPV4_IN_IPV6_PREFIX = bytes(10) + b"\xff\xff"
TORV2_IN_IPV6_PREFIX = bytes.fromhex("fd87d87eeb43")
LEGACY_ADDR_SIZE = 16
MAX_ADDRV2_SIZE = 512

TORV3_VERSION = b"\x03"
TORV3_CHECKSUM_SALT = b".onion checksum"

HostKey = ipaddress.IPv4Address | ipaddress.IPv6Address | str


class Network(IntEnum):
    """BIP155 network ids."""

    IPV4 = 1
    IPV6 = 2
    TORV2 = 3
    TORV3 = 4
    I2P = 5
    CJDNS = 6


ADDR_SIZES = {
    Network.IPV4: 4,
    Network.IPV6: 16,
    Network.TORV2: 10,
    Network.TORV3: 32,
    Network.I2P: 32,
    Network.CJDNS: 16,
}


def _b32(data: bytes) -> str:
    return base64.b32encode(data).decode("ascii").lower().rstrip("=")


def _torv3_checksum(pubkey: bytes) -> bytes:
    return hashlib.sha3_256(TORV3_CHECKSUM_SALT + pubkey + TORV3_VERSION).digest()[:2]


@dataclass(frozen=True, slots=True)
class NetAddress:
    network: Network
    raw: bytes

    def __post_init__(self) -> None:
        expected = ADDR_SIZES[self.network]
        if len(self.raw) != expected:
            raise ValueError(f"{self.network.name} address must be {expected} bytes, got {len(self.raw)}")

    @classmethod
    def from_legacy(cls, raw: bytes) -> NetAddress:
        """Unwrap a 16-byte legacy address into its real network."""
        if len(raw) != LEGACY_ADDR_SIZE:
            raise ValueError(f"Legacy address must be {LEGACY_ADDR_SIZE} bytes")
        if raw.startswith(IPV4_IN_IPV6_PREFIX):
            return cls(Network.IPV4, raw[len(IPV4_IN_IPV6_PREFIX) :])
        if raw.startswith(TORV2_IN_IPV6_PREFIX):
            return cls(Network.TORV2, raw[len(TORV2_IN_IPV6_PREFIX) :])
        return cls(Network.IPV6, raw)

    @classmethod
    def from_bip155(cls, network_id: int, raw: bytes) -> NetAddress:
        try:
            network = Network(network_id)
        except ValueError as exc:
            raise ValueError(f"Unknown network id {network_id}") from exc
        return cls(network, raw)

    @property
    def host(self) -> str:
        """Canonical textual host, as peers and crawlers print it."""
        if self.network is Network.IPV4:
            return str(ipaddress.IPv4Address(self.raw))
        if self.network in (Network.IPV6, Network.CJDNS):
            return str(ipaddress.IPv6Address(self.raw))
        if self.network is Network.TORV2:
            return _b32(self.raw) + ".onion"
        if self.network is Network.TORV3:
            return _b32(self.raw + _torv3_checksum(self.raw) + TORV3_VERSION) + ".onion"
        return _b32(self.raw) + ".b32.i2p"

    @property
    def host_key(self) -> HostKey:
        """Value used to compare hosts across sources."""
        if self.network is Network.IPV4:
            return ipaddress.IPv4Address(self.raw)
        if self.network in (Network.IPV6, Network.CJDNS):
            addr = ipaddress.IPv6Address(self.raw)
            return addr.ipv4_mapped or addr
        return self.host

    def __str__(self) -> str:
        return self.host


@dataclass(frozen=True, slots=True)
class ServiceAddress:
    address: NetAddress
    port: int

    def __post_init__(self) -> None:
        if not (0 <= self.port <= 0xFFFF):
            raise ValueError(f"Invalid port {self.port}")

    @property
    def host(self) -> str:
        return self.address.host

    @property
    def host_key(self) -> HostKey:
        return self.address.host_key

    def __str__(self) -> str:
        if self.address.network in (Network.IPV6, Network.CJDNS):
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def parse_host_key(text: str) -> HostKey | None:
    """
    Parse a textual host into the same key ``NetAddress.host_key`` produces.

    Accepts bare hosts, bracketed IPv6 and an optional ``:port`` suffix after a
    bracket or a non-IPv6 host. Returns None for blank input.
    """

    value = text.strip()
    if not value:
        return None
    if value.startswith("["):
        end = value.find("]")
        if end == -1:
            raise ValueError(f"Unterminated IPv6 bracket in {text!r}")
        value = value[1:end]
    elif value.count(":") == 1:
        value = value.rsplit(":", 1)[0]
    try:
        addr = ipaddress.ip_address(value)
    except ValueError:
        return value.lower()
    if isinstance(addr, ipaddress.IPv6Address) and addr.ipv4_mapped is not None:
        return addr.ipv4_mapped
    return addr
