"""
Reachability statistics for Bitcoin Core peers.dat snapshots.
"""

__version__ = "0.1.0"
