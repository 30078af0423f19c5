"""
Peer address database exports.
"""

from .netaddr import NetAddress, Network, ServiceAddress, parse_host_key
from .peers import AddressTable, PeerDatabase, PeerRecord, decode_peers_db, load_peers_db

__all__ = [
    "AddressTable",
    "NetAddress",
    "Network",
    "PeerDatabase",
    "PeerRecord",
    "ServiceAddress",
    "decode_peers_db",
    "load_peers_db",
    "parse_host_key",
]
