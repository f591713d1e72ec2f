#!/usr/bin/env python3
"""
Test suite for the zone exporter and the command line tools
"""

import io
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest.mock import Mock, patch

import yaml
from sqlalchemy import create_engine, text
from sqlalchemy.dialects import mysql
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from dns_sql_backend.cli import main as cli_main
from dns_sql_backend.cli import zonetodb
from dns_sql_backend.core.binding import ZoneBinding
from dns_sql_backend.core.config import BindingConfig
from dns_sql_backend.core.exporter import ZoneExporter, iter_zone_rows
from dns_sql_backend.core.record_mapper import ResourceRecord
from dns_sql_backend.core.session import ConnectionSession
from dns_sql_backend.core.wildcard import is_wildcard
from dns_sql_backend.exceptions import ExportError
from dns_sql_backend.parsers.zone_file import load_zone

EXAMPLE_ZONE = """\
$TTL 3600
@       IN SOA  ns1.example.com. hostmaster.example.com. 2024010101 7200 3600 1209600 300
@       IN NS   ns1.example.com.
ns1     IN A    192.0.2.53
a       IN A    192.0.2.1
b       IN A    192.0.2.2
www 600 IN CNAME a
mail    IN MX   10 a
mail    IN A    192.0.2.25
txt     IN TXT  "it's here"
*       IN A    192.0.2.99
"""


class ExportTestCase(unittest.TestCase):
    """Base class with a zone file and a SQLite database."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.zone_file = os.path.join(self.temp_dir, "db.example.com")
        with open(self.zone_file, "w") as f:
            f.write(EXAMPLE_ZONE)
        self.db_path = os.path.join(self.temp_dir, "zones.db")
        self.config = BindingConfig(database=self.db_path, table="example", driver="sqlite")

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def export(self, zone=None):
        statements = []
        session = ConnectionSession(self.config)
        try:
            exporter = ZoneExporter("example", session.connect(), echo=statements.append)
            result = exporter.export(zone or load_zone("example.com", self.zone_file))
        finally:
            session.close()
        return result, statements


class TestZoneFileParser(ExportTestCase):
    """Test zone file loading."""

    def test_load_zone(self):
        """Test that names are absolute."""
        zone = load_zone("example.com", self.zone_file)
        names = {name.to_text() for name in zone.nodes}
        self.assertIn("www.example.com.", names)
        self.assertIn("*.example.com.", names)

    def test_missing_file(self):
        """Test a zone file that does not exist."""
        with self.assertRaises(ExportError):
            load_zone("example.com", os.path.join(self.temp_dir, "missing"))

    def test_invalid_file(self):
        """Test a zone file without SOA."""
        bad = os.path.join(self.temp_dir, "bad")
        with open(bad, "w") as f:
            f.write("a 300 IN A 192.0.2.1\n")
        with self.assertRaises(ExportError):
            load_zone("example.com", bad)


class TestZoneExporter(ExportTestCase):
    """Test exporting a zone into a table."""

    def test_rows(self):
        """Test row rendering."""
        rows = list(iter_zone_rows(load_zone("example.com", self.zone_file)))

        self.assertIn(("www.example.com", 600, "CNAME", "a.example.com."), rows)
        self.assertIn(("mail.example.com", 3600, "MX", "10 a.example.com."), rows)
        self.assertIn(("txt.example.com", 3600, "TXT", '"it\'s here"'), rows)
        self.assertTrue(all(not row.name.endswith(".") for row in rows))

    def test_reset_precedes_inserts(self):
        """Test that DROP and CREATE come before any INSERT."""
        result, statements = self.export()

        self.assertTrue(statements[0].startswith("DROP TABLE IF EXISTS"))
        self.assertTrue(statements[1].startswith("CREATE TABLE"))
        self.assertTrue(all(s.startswith("INSERT INTO") for s in statements[2:]))
        self.assertEqual(len(statements) - 2, result.rows)
        self.assertEqual(result.statements, statements)

    def test_counts(self):
        """Test the export summary."""
        result, _ = self.export()
        self.assertEqual(result.rows, 10)
        self.assertEqual(result.names, 8)
        self.assertEqual(result.wildcard_names, 1)

    def test_quoting_in_echo(self):
        """Test that echoed literals are escaped."""
        _, statements = self.export()
        txt = [s for s in statements if "TXT" in s][0]
        self.assertIn("'\"it''s here\"'", txt)

    def test_round_trip(self):
        """Test that every exported name resolves to its original records."""
        zone = load_zone("example.com", self.zone_file)
        self.export(zone)

        expected = {}
        for row in iter_zone_rows(zone):
            expected.setdefault(row.name, set()).add(ResourceRecord(row.ttl, row.type, row.data))

        with ZoneBinding.create("example.com", self.config) as binding:
            for name, records in expected.items():
                if is_wildcard(name):
                    continue
                with self.subTest(name=name):
                    self.assertEqual(set(binding.lookup(name)), records)

            self.assertEqual(
                binding.lookup("nothing.example.com"),
                [ResourceRecord(3600, "A", "192.0.2.99")],
            )

    def test_export_replaces_table(self):
        """Test that exporting twice does not duplicate rows."""
        self.export()
        self.export()

        with ZoneBinding.create("example.com", self.config) as binding:
            self.assertEqual(len(binding.enumerate()), 10)

    def test_dry_run(self):
        """Test rendering statements without a connection."""
        statements = []
        exporter = ZoneExporter("example", echo=statements.append)
        result = exporter.export(load_zone("example.com", self.zone_file))

        self.assertTrue(exporter.dry_run)
        self.assertEqual(result.rows, 10)
        self.assertTrue(statements[0].startswith("DROP TABLE IF EXISTS example"))
        self.assertFalse(os.path.exists(self.db_path))

    def _persisted_rows(self):
        engine = create_engine(f"sqlite:///{self.db_path}")
        try:
            with engine.connect() as conn:
                return conn.execute(text("SELECT COUNT(*) FROM example")).scalar()
        finally:
            engine.dispose()

    def test_export_through_plain_connection(self):
        """Test that rows written through an ordinary connection are committed."""
        engine = create_engine(f"sqlite:///{self.db_path}")
        conn = engine.connect()
        result = ZoneExporter("example", conn).export(load_zone("example.com", self.zone_file))
        conn.close()
        engine.dispose()

        self.assertEqual(result.rows, 10)
        self.assertEqual(self._persisted_rows(), 10)

    def test_export_inside_open_transaction(self):
        """Test a connection that already began a transaction."""
        engine = create_engine(f"sqlite:///{self.db_path}")
        conn = engine.connect()
        conn.execute(text("SELECT 1"))
        self.assertTrue(conn.in_transaction())

        ZoneExporter("example", conn).export(load_zone("example.com", self.zone_file))
        conn.close()
        engine.dispose()

        self.assertEqual(self._persisted_rows(), 10)

    def test_export_through_engine(self):
        """Test exporting with an engine and resolving the result."""
        engine = create_engine(f"sqlite:///{self.db_path}")
        try:
            result = ZoneExporter("example", engine).export(
                load_zone("example.com", self.zone_file)
            )
        finally:
            engine.dispose()

        self.assertEqual(result.rows, 10)
        with ZoneBinding.create("example.com", self.config) as binding:
            self.assertEqual(binding.lookup("b.example.com"), [ResourceRecord(3600, "A", "192.0.2.2")])

    def test_engine_connection_failure(self):
        """Test that an engine that cannot connect raises an export error."""
        engine = Mock(spec=Engine)
        engine.dialect = mysql.dialect()
        engine.connect.side_effect = OperationalError("connect", {}, Exception("refused"))

        with self.assertRaises(ExportError):
            ZoneExporter("example", engine).export(load_zone("example.com", self.zone_file))

    def _mock_connection(self, side_effect):
        connection = Mock()
        connection.dialect = mysql.dialect()
        connection.execute.side_effect = side_effect
        return connection

    def test_create_failure_is_fatal(self):
        """Test that a failed CREATE aborts the export."""
        failure = OperationalError("CREATE TABLE", {}, Exception("denied"))
        connection = self._mock_connection([None, failure])

        with self.assertRaises(ExportError):
            ZoneExporter("example", connection).export(load_zone("example.com", self.zone_file))
        self.assertEqual(connection.execute.call_count, 2)

    def test_drop_failure_is_not_fatal(self):
        """Test that a failed DROP is only logged."""
        failure = OperationalError("DROP TABLE", {}, Exception("denied"))
        connection = self._mock_connection([failure] + [None] * 20)

        result = ZoneExporter("example", connection).export(load_zone("example.com", self.zone_file))
        self.assertEqual(result.rows, 10)

    def test_insert_failure_is_fatal(self):
        """Test that a failed INSERT aborts without rolling back."""
        failure = OperationalError("INSERT", {}, Exception("lost"))
        connection = self._mock_connection([None, None, None, failure])

        with self.assertRaises(ExportError):
            ZoneExporter("example", connection).export(load_zone("example.com", self.zone_file))
        self.assertEqual(connection.execute.call_count, 4)
        connection.rollback.assert_not_called()

    def test_oversized_field_is_fatal(self):
        """Test that data wider than the column aborts the export."""
        long_zone = os.path.join(self.temp_dir, "long")
        with open(long_zone, "w") as f:
            f.write(EXAMPLE_ZONE)
            f.write('long IN TXT "' + "x" * 250 + '" "' + "y" * 10 + '"\n')

        with self.assertRaises(ExportError):
            ZoneExporter("example").export(load_zone("example.com", long_zone))


class TestZoneToDbCli(ExportTestCase):
    """Test the zonetodb command."""

    def run_cli(self, argv):
        out = io.StringIO()
        with redirect_stdout(out), patch.object(zonetodb, "config_logger"):
            with self.assertRaises(SystemExit) as ctx:
                zonetodb.main(argv)
        return ctx.exception.code, out.getvalue()

    def test_wrong_argument_count(self):
        """Test that a wrong number of arguments exits with status 1."""
        for argv in ([], ["example.com", self.zone_file], ["a", "b", "c", "d", "e", "f", "g"]):
            with self.subTest(argv=argv):
                with patch("sys.stderr", new_callable=io.StringIO):
                    code, output = self.run_cli(argv)
                self.assertEqual(code, 1)
                self.assertIn("usage", output)

    def test_dry_run(self):
        """Test that statements are echoed."""
        code, output = self.run_cli(
            ["example.com", self.zone_file, "dns", "example", "u", "p", "--dry-run"]
        )
        self.assertEqual(code, 0)
        self.assertIn("CREATE TABLE example", output)
        self.assertIn("INSERT INTO example", output)

    def test_export(self):
        """Test a full export into SQLite."""
        sqlite_session = lambda config: ConnectionSession(self.config)

        with patch.object(zonetodb, "ConnectionSession", side_effect=sqlite_session):
            code, output = self.run_cli(
                ["example.com", self.zone_file, "dns", "example", "u", "p"]
            )

        self.assertEqual(code, 0)
        self.assertIn("Connecting to 'dns'", output)
        with ZoneBinding.create("example.com", self.config) as binding:
            self.assertEqual(binding.lookup("a.example.com"), [ResourceRecord(3600, "A", "192.0.2.1")])

    def test_connection_failure(self):
        """Test that an unreachable database exits with status 1."""
        session = Mock()
        session.connect.side_effect = zonetodb.SQLBackendError("refused")

        with patch.object(zonetodb, "ConnectionSession", return_value=session), \
                patch("sys.stderr", new_callable=io.StringIO):
            code, _ = self.run_cli(["example.com", self.zone_file, "dns", "example", "u", "p"])

        self.assertEqual(code, 1)
        session.close.assert_called_once()

    def test_bad_zone_file(self):
        """Test that an unreadable zone file exits with status 1."""
        with patch("sys.stderr", new_callable=io.StringIO):
            code, _ = self.run_cli(
                ["example.com", os.path.join(self.temp_dir, "missing"), "dns", "t", "u", "p"]
            )
        self.assertEqual(code, 1)


class TestLookupCli(ExportTestCase):
    """Test the dns-sql lookup and dump commands."""

    def setUp(self):
        super().setUp()
        self.export()
        self.config_file = os.path.join(self.temp_dir, "config.yaml")
        with open(self.config_file, "w") as f:
            yaml.dump(
                {
                    "driver": "sqlite",
                    "zones": {"example.com": {"database": self.db_path, "table": "example"}},
                },
                f,
            )

    def run_cli(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out), patch.object(cli_main, "config_logger"), \
                patch.object(cli_main, "console", cli_main.Console(file=out, width=200)):
            with self.assertRaises(SystemExit) as ctx:
                cli_main.main(["--config", self.config_file, *argv])
        return ctx.exception.code, out.getvalue()

    def test_lookup(self):
        """Test resolving a name."""
        code, output = self.run_cli("lookup", "example.com", "A.EXAMPLE.COM")
        self.assertEqual(code, 0)
        self.assertIn("192.0.2.1", output)

    def test_lookup_rrsets(self):
        """Test printing RRsets."""
        code, output = self.run_cli("lookup", "example.com", "www.example.com", "--rrsets")
        self.assertEqual(code, 0)
        self.assertIn("CNAME a.example.com.", output)

    def test_lookup_not_found(self):
        """Test a name with no records under a zone with no matching wildcard."""
        code, output = self.run_cli("lookup", "example.com", "x.other.org")
        self.assertEqual(code, 1)
        self.assertIn("Not found", output)

    def test_dump(self):
        """Test listing the zone."""
        code, output = self.run_cli("dump", "example.com")
        self.assertEqual(code, 0)
        self.assertIn("10 records", output)

    def test_unknown_zone(self):
        """Test a zone missing from the configuration."""
        code, output = self.run_cli("dump", "unknown.com")
        self.assertEqual(code, 1)
        self.assertIn("not configured", output)


if __name__ == "__main__":
    unittest.main(verbosity=2)
