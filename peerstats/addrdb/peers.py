"""
Decoder for Bitcoin Core's peers.dat address manager snapshot.
"""

from __future__ import annotations

import logging
import struct
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from ..errors import DecodeError, InputFileError
from .netaddr import LEGACY_ADDR_SIZE, MAX_ADDRV2_SIZE, HostKey, NetAddress, ServiceAddress

__all__ = [
    "AddressTable",
    "NETWORK_MAGIC",
    "PeerDatabase",
    "PeerRecord",
    "decode_peers_db",
    "load_peers_db",
]

NETWORK_MAGIC = {
    bytes.fromhex("f9beb4d9"): "main",
    bytes.fromhex("0b110907"): "test",
    bytes.fromhex("1c163f28"): "testnet4",
    bytes.fromhex("0a03cf40"): "signet",
    bytes.fromhex("fabfb5da"): "regtest",
}

FILE_FORMAT = 4  # V4_MULTIPORT
FORMAT_BIP155 = 3
INCOMPATIBILITY_BASE = 32
KEY_SIZE = 32
BUCKET_COUNT_XOR = 1 << 30
ADDRV2_FORMAT = 1 << 29
MAX_NEW = 1024 * 64
MAX_TRIED = 256 * 64

U8 = struct.Struct("<B")
I32 = struct.Struct("<i")
U32 = struct.Struct("<I")
I64 = struct.Struct("<q")
U64 = struct.Struct("<Q")
PORT = struct.Struct(">H")

log = logging.getLogger("peerstats.addrdb")


@dataclass(frozen=True, slots=True)
class PeerRecord:
    address: ServiceAddress
    timestamp: int
    services: int = 0
    source: NetAddress | None = None
    last_success: int = 0
    attempts: int = 0

    @property
    def host_key(self) -> HostKey:
        return self.address.host_key


@dataclass(frozen=True, slots=True)
class AddressTable:
    """One addrman tier. ``declared`` is the count the snapshot header promised."""

    name: str
    declared: int
    records: tuple[PeerRecord, ...]

    def __post_init__(self) -> None:
        if len(self.records) != self.declared:
            raise ValueError(f"{self.name} table holds {len(self.records)} records, header declared {self.declared}")

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[PeerRecord]:
        return iter(self.records)

    def timestamps(self) -> list[int]:
        return [record.timestamp for record in self.records]


@dataclass(frozen=True, slots=True)
class PeerDatabase:
    network: str
    format_version: int
    lowest_compatible: int
    bucket_count: int
    new: AddressTable
    tried: AddressTable

    @property
    def tables(self) -> tuple[AddressTable, AddressTable]:
        return self.new, self.tried

    def record_count(self) -> int:
        return len(self.new) + len(self.tried)


class _Reader:
    """Forward-only cursor over the snapshot bytes."""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def read(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise ValueError(f"Truncated input: wanted {size} bytes, {len(self.data) - self.offset} left")
        chunk = self.data[self.offset : end]
        self.offset = end
        return chunk

    def unpack(self, fmt: struct.Struct) -> int:
        return fmt.unpack(self.read(fmt.size))[0]

    def compact_size(self) -> int:
        prefix = self.unpack(U8)
        if prefix < 0xFD:
            value, minimum = prefix, 0
        elif prefix == 0xFD:
            value, minimum = int.from_bytes(self.read(2), "little"), 0xFD
        elif prefix == 0xFE:
            value, minimum = self.unpack(U32), 0x10000
        else:
            value, minimum = self.unpack(U64), 0x100000000
        if value < minimum:
            raise ValueError("Non-canonical compact size")
        return value

    def net_address(self, addrv2: bool) -> NetAddress:
        if not addrv2:
            return NetAddress.from_legacy(self.read(LEGACY_ADDR_SIZE))
        network_id = self.unpack(U8)
        size = self.compact_size()
        if size > MAX_ADDRV2_SIZE:
            raise ValueError(f"Address too long ({size} bytes)")
        return NetAddress.from_bip155(network_id, self.read(size))


def _read_record(reader: _Reader, source_addrv2: bool) -> PeerRecord:
    version = reader.unpack(I32)
    addrv2 = bool(version & ADDRV2_FORMAT)
    timestamp = reader.unpack(U32)
    services = reader.compact_size() if addrv2 else reader.unpack(U64)
    address = reader.net_address(addrv2)
    port = reader.unpack(PORT)
    source = reader.net_address(source_addrv2)
    last_success = reader.unpack(I64)
    attempts = reader.unpack(I32)
    return PeerRecord(
        address=ServiceAddress(address, port),
        timestamp=timestamp,
        services=services,
        source=source,
        last_success=last_success,
        attempts=attempts,
    )


def _read_table(reader: _Reader, name: str, count: int, source_addrv2: bool) -> AddressTable:
    records = []
    for index in range(count):
        start = reader.offset
        try:
            records.append(_read_record(reader, source_addrv2))
        except ValueError as exc:
            raise DecodeError("record", str(exc), table=name, index=index, offset=start) from exc
    return AddressTable(name=name, declared=count, records=tuple(records))


def decode_peers_db(data: bytes, *, networks: Iterable[str] | None = None) -> PeerDatabase:
    """
    Decode a peers.dat snapshot.

    Only the header and the ``new``/``tried`` entries are read; the bucket
    layout and trailing checksum that follow are left untouched. Raises
    DecodeError naming the stage that failed.
    """

    allowed = set(NETWORK_MAGIC.values()) if networks is None else set(networks)
    reader = _Reader(bytes(data))
    try:
        magic = reader.read(4)
        network = NETWORK_MAGIC.get(magic)
        if network is None:
            raise ValueError(f"Unrecognized network magic {magic.hex()}")
        if network not in allowed:
            raise ValueError(f"Snapshot belongs to {network}, expected one of {sorted(allowed)}")
        format_version = reader.unpack(U8)
        compat = reader.unpack(U8)
        lowest_compatible = compat - INCOMPATIBILITY_BASE
        if lowest_compatible < 0 or lowest_compatible > FILE_FORMAT:
            raise ValueError(
                f"Unsupported format {format_version} (lowest compatible {lowest_compatible}, "
                f"highest understood {FILE_FORMAT})"
            )
        reader.read(KEY_SIZE)
    except ValueError as exc:
        raise DecodeError("header", str(exc), offset=reader.offset) from exc

    try:
        n_new = reader.unpack(I32)
        n_tried = reader.unpack(I32)
        bucket_count = reader.unpack(I32)
    except ValueError as exc:
        raise DecodeError("count", str(exc), offset=reader.offset) from exc
    if not (0 <= n_new <= MAX_NEW):
        raise DecodeError("count", f"new table size {n_new} outside 0..{MAX_NEW}", offset=reader.offset)
    if not (0 <= n_tried <= MAX_TRIED):
        raise DecodeError("count", f"tried table size {n_tried} outside 0..{MAX_TRIED}", offset=reader.offset)
    if format_version >= 1:
        bucket_count ^= BUCKET_COUNT_XOR

    source_addrv2 = format_version >= FORMAT_BIP155
    new = _read_table(reader, "new", n_new, source_addrv2)
    tried = _read_table(reader, "tried", n_tried, source_addrv2)
    return PeerDatabase(
        network=network,
        format_version=format_version,
        lowest_compatible=lowest_compatible,
        bucket_count=bucket_count,
        new=new,
        tried=tried,
    )


def load_peers_db(path: Path, *, networks: Iterable[str] | None = None) -> PeerDatabase:
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise InputFileError(path, exc.strerror or str(exc)) from exc
    db = decode_peers_db(data, networks=networks)
    log.info(
        "Decoded %s (%s, format %d): %d new, %d tried",
        path,
        db.network,
        db.format_version,
        len(db.new),
        len(db.tried),
    )
    return db
