"""
Tests for the command line entry point.
"""

import json
import shutil
import tempfile
import unittest
from pathlib import Path

import main
from flamenode.store import DatabaseManager, DuckDBNodeStore


class TestMain(unittest.TestCase):
    """Test full runs through main()."""

    def setUp(self):
        """Set up a scratch directory with its own configuration."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.db_path = self.temp_dir / "nodes.db"
        self.output_path = self.temp_dir / "out" / "nodes.json"
        self.config_path = self.temp_dir / "config.yaml"
        with open(self.config_path, 'w') as f:
            f.write(
                "database:\n"
                f"  filename: '{self.db_path}'\n"
                "paths:\n"
                f"  log_file: '{self.temp_dir / 'flamenode.log'}'\n"
                "media:\n"
                f"  cache_dir: '{self.temp_dir / 'media'}'\n"
            )

    def tearDown(self):
        """Clean up the scratch directory."""
        shutil.rmtree(self.temp_dir)

    def test_parse_arguments_defaults(self):
        args = main.parse_arguments([])

        self.assertEqual(args.config, "config.yaml")
        self.assertEqual(args.source, "flamelink")
        self.assertFalse(args.prune)
        self.assertFalse(args.no_download)

    def test_mock_run_writes_output_and_database(self):
        main.main([
            "--config", str(self.config_path),
            "--source", "mock",
            "--no-download",
            "--output", str(self.output_path),
        ])

        with open(self.output_path, encoding='utf-8') as f:
            records = json.load(f)

        types = {record["internal"]["type"] for record in records}
        self.assertIn("FlamelinkBlogPostContent", types)
        self.assertIn("FlamelinkGlobals", types)
        self.assertIn("FlamelinkMainNavigationNavigation", types)

        with DatabaseManager(str(self.db_path)) as db:
            stored = DuckDBNodeStore(db).list_nodes()
        self.assertEqual(len(stored), len(records))

    def test_prune_keeps_nodes_of_current_run(self):
        args = [
            "--config", str(self.config_path),
            "--source", "mock",
            "--no-download",
            "--prune",
        ]
        main.main(args)
        main.main(args)

        with DatabaseManager(str(self.db_path)) as db:
            self.assertGreater(len(DuckDBNodeStore(db).list_nodes()), 0)

    def test_missing_firebase_settings_exit(self):
        with self.assertRaises(SystemExit) as ctx:
            main.main(["--config", str(self.config_path), "--source", "flamelink"])

        self.assertEqual(ctx.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
