"""
CLI entry point for computing peers.dat reachability statistics.

Usage: run_peerstats.py ./node1/ /data/bitnodes/stripped/ /data/bitnodes/timestamps.txt
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from peerstats.config import ConfigError, load_config
from peerstats.errors import PeerStatsError
from peerstats.logging import setup_logging
from peerstats.report import write_report
from peerstats.stats import run


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reachability statistics for a peers.dat snapshot")
    parser.add_argument("peers", type=Path, nargs="?", help="peers.dat file, or a directory holding one")
    parser.add_argument("corpus_dir", type=Path, nargs="?", help="Directory of <timestamp>.txt reachable-address lists")
    parser.add_argument("timestamps", type=Path, nargs="?", help="File listing available corpus timestamps")
    parser.add_argument("--config", type=Path, help="Path to config JSON")
    parser.add_argument("--output-dir", type=Path, help="Where to write the table stats files")
    parser.add_argument("--log-file", type=Path, help="Also log to this file")
    parser.add_argument("--log-level", default="info", help="Log level (debug, info, warning, error)")
    return parser.parse_args(argv)


def build_overrides(args: argparse.Namespace) -> dict:
    overrides: dict = {}
    if args.peers:
        overrides.setdefault("input", {})["peers_file"] = str(args.peers)
    if args.corpus_dir:
        overrides.setdefault("input", {})["corpus_dir"] = str(args.corpus_dir)
    if args.timestamps:
        overrides.setdefault("input", {})["timestamps_file"] = str(args.timestamps)
    if args.output_dir:
        overrides.setdefault("output", {})["output_dir"] = str(args.output_dir)
    if args.log_file:
        overrides["log_file"] = str(args.log_file)
    return overrides


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = load_config(args.config, overrides=build_overrides(args))
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 1

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    logger = setup_logging(config.log_file, level=log_level)
    try:
        report = run(config)
        write_report(
            report,
            config.output.output_dir,
            new_name=config.output.new_table_file,
            tried_name=config.output.tried_table_file,
        )
    except (PeerStatsError, OSError) as exc:
        logger.error("Run failed: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
