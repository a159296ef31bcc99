import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from config import CONFIG_ENV, DEFAULT_CONFIG, config_path, load_config


class TestLoadConfig(unittest.TestCase):
    """Tests for config.json loading."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = Path(self.temp_dir.name) / "config.json"

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_missing_file_gives_defaults(self):
        self.assertEqual(load_config(self.path), DEFAULT_CONFIG)

    def test_nested_values_merged(self):
        """Overrides replace single keys without dropping sibling defaults."""
        self.path.write_text(json.dumps({"log_level": "DEBUG", "candidates": {"source": "url"}}),
                             encoding="utf-8")
        config = load_config(self.path)

        self.assertEqual(config["log_level"], "DEBUG")
        self.assertEqual(config["candidates"]["source"], "url")
        self.assertEqual(config["candidates"]["timeout"], 10)
        self.assertEqual(config["db_path"], DEFAULT_CONFIG["db_path"])

    def test_invalid_json_gives_defaults(self):
        self.path.write_text("{broken", encoding="utf-8")
        self.assertEqual(load_config(self.path), DEFAULT_CONFIG)

    def test_non_object_gives_defaults(self):
        self.path.write_text("[1, 2]", encoding="utf-8")
        self.assertEqual(load_config(self.path), DEFAULT_CONFIG)

    def test_defaults_not_mutated(self):
        self.path.write_text(json.dumps({"candidates": {"path": "x.json"}}), encoding="utf-8")
        load_config(self.path)
        self.assertEqual(DEFAULT_CONFIG["candidates"]["path"], "")

    def test_env_override(self):
        with mock.patch.dict(os.environ, {CONFIG_ENV: str(self.path)}):
            self.assertEqual(config_path(), self.path)


if __name__ == "__main__":
    unittest.main()
