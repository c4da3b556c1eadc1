"""
Tests for ImportConfig.
"""
import shutil
import tempfile
import unittest
from pathlib import Path

from wikigraph.config import ImportConfig


class TestImportConfig(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_defaults(self):
        config = ImportConfig(root_dir=self.temp_dir)

        self.assertIsInstance(config.root_dir, Path)
        self.assertEqual(config.store, "memory")
        self.assertEqual(config.crosslink_batch_size, 5)
        self.assertEqual(config.edition_dir("fr"), Path(self.temp_dir) / "fr")
        self.assertEqual(config.checkpoint_path, Path(self.temp_dir) / "wikigraph-checkpoint")
        self.assertEqual(config.graph_path, Path(self.temp_dir) / "graph")

    def test_graph_dir_override(self):
        config = ImportConfig(root_dir=self.temp_dir, graph_dir="/tmp/out")
        self.assertEqual(config.graph_path, Path("/tmp/out"))

    def test_invalid_store(self):
        with self.assertRaises(ValueError):
            ImportConfig(root_dir=self.temp_dir, store="sqlite")

    def test_invalid_batch_size(self):
        with self.assertRaises(ValueError):
            ImportConfig(root_dir=self.temp_dir, crosslink_batch_size=0)

    def test_invalid_import_batch_size(self):
        with self.assertRaises(ValueError):
            ImportConfig(root_dir=self.temp_dir, import_batch_size=0)

    def test_default_neo4j_password_warns(self):
        with self.assertLogs("wikigraph.config", level="WARNING"):
            ImportConfig(root_dir=self.temp_dir, store="neo4j")

    def test_save_and_load(self):
        path = Path(self.temp_dir) / "config.json"
        config = ImportConfig(
            root_dir=self.temp_dir,
            store="neo4j",
            neo4j_password="secret",
            neo4j_database="wiki",
            crosslink_batch_size=2,
            import_batch_size=100,
            keep_working_files=True,
        )

        config.save(path)
        loaded = ImportConfig.load(path)

        self.assertEqual(loaded, config)
        self.assertIsNone(loaded.graph_dir)


if __name__ == "__main__":
    unittest.main()
