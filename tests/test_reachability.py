import ipaddress
import tempfile
import unittest
from pathlib import Path

from peerstats.addrdb import decode_peers_db
from peerstats.errors import InputFileError
from peerstats.stats.reachability import (
    host_set,
    match_corpus_file,
    match_reachable,
    normalize_host,
    reachable_fraction,
)

from snapshot_factory import encode_record, encode_snapshot, ipv4, ipv6, simple_snapshot


class ReachabilityTests(unittest.TestCase):
    def test_single_table_scenario(self) -> None:
        db = decode_peers_db(simple_snapshot([("1.2.3.4", 10), ("9.9.9.9", 20)], []))
        (count,) = match_reachable(["1.2.3.4", "5.6.7.8"], [db.new])
        self.assertEqual(count, 1)
        self.assertEqual(reachable_fraction(count, len(db.new)), 0.5)

    def test_one_pass_serves_both_tables(self) -> None:
        db = decode_peers_db(
            simple_snapshot(
                [("1.1.1.1", 1), ("2.2.2.2", 2), ("3.3.3.3", 3)],
                [("2.2.2.2", 4), ("4.4.4.4", 5)],
            )
        )
        consumed = []

        def lines():
            for line in ("2.2.2.2\n", "4.4.4.4\n", "1.1.1.1\n", "8.8.8.8\n"):
                consumed.append(line)
                yield line

        self.assertEqual(match_reachable(lines(), db.tables), (2, 2))
        self.assertEqual(len(consumed), 4)

    def test_ports_of_any_width_do_not_matter(self) -> None:
        raw = encode_snapshot(
            [
                encode_record(ipv4("10.0.0.1"), 1, port=1),
                encode_record(ipv4("10.0.0.2"), 1, port=65535),
                encode_record(ipv6("2001:db8::5"), 1, port=8333),
            ],
            [],
        )
        db = decode_peers_db(raw)
        self.assertEqual(
            host_set(db.new),
            {
                ipaddress.IPv4Address("10.0.0.1"),
                ipaddress.IPv4Address("10.0.0.2"),
                ipaddress.IPv6Address("2001:db8::5"),
            },
        )
        corpus = ["10.0.0.1", "10.0.0.2", "[2001:db8:0::5]"]
        self.assertEqual(match_reachable(corpus, [db.new]), (3,))

    def test_duplicate_corpus_lines_count_once(self) -> None:
        db = decode_peers_db(simple_snapshot([("1.2.3.4", 10)], []))
        (count,) = match_reachable(["1.2.3.4", "1.2.3.4", " 1.2.3.4 "], [db.new])
        self.assertEqual(count, 1)

    def test_count_bounded_by_table_size(self) -> None:
        db = decode_peers_db(simple_snapshot([("1.2.3.4", 10), ("1.2.3.4", 11)], []))
        (count,) = match_reachable(["1.2.3.4"], [db.new])
        self.assertLessEqual(count, len(db.new))
        self.assertEqual(count, 1)

    def test_blank_and_malformed_lines_are_skipped(self) -> None:
        self.assertIsNone(normalize_host(""))
        self.assertIsNone(normalize_host("[::1"))
        db = decode_peers_db(simple_snapshot([("1.2.3.4", 10)], []))
        self.assertEqual(match_reachable(["", "[::1", "1.2.3.4"], [db.new]), (1,))

    def test_empty_table_has_no_fraction(self) -> None:
        self.assertIsNone(reachable_fraction(0, 0))
        db = decode_peers_db(simple_snapshot([("1.2.3.4", 10)], []))
        self.assertEqual(match_reachable(["1.2.3.4"], db.tables), (1, 0))


class CorpusFileTests(unittest.TestCase):
    def test_reads_corpus_file(self) -> None:
        db = decode_peers_db(simple_snapshot([("1.2.3.4", 10)], [("5.6.7.8", 10)]))
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "100.txt"
            path.write_text("1.2.3.4\n5.6.7.8\n", encoding="utf-8")
            self.assertEqual(match_corpus_file(path, db.tables), (1, 1))

    def test_missing_corpus_file(self) -> None:
        db = decode_peers_db(simple_snapshot([("1.2.3.4", 10)], []))
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "100.txt"
            with self.assertRaises(InputFileError) as ctx:
                match_corpus_file(path, db.tables)
        self.assertEqual(ctx.exception.path, path)


if __name__ == "__main__":
    unittest.main()
