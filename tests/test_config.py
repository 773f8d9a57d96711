import os
import stat
import tempfile
import unittest
from pathlib import Path

from fnr.config import Config, ConfigManager
from fnr.errors import ConfigError


class ConfigManagerTests(unittest.TestCase):
    def setUp(self):
        self._tmp_dir = tempfile.TemporaryDirectory()
        self.config_file = Path(self._tmp_dir.name) / ".fnr_config.toml"
        self.manager = ConfigManager(self.config_file)

    def tearDown(self):
        self._tmp_dir.cleanup()

    def test_missing_file_gives_defaults(self):
        self.assertEqual(self.manager.load_config(), Config())

    def test_save_and_load_round_trip(self):
        self.manager.save_config(context=2, color="never", unknown="ignored")

        loaded = self.manager.load_config()

        self.assertEqual(loaded.context, 2)
        self.assertEqual(loaded.color, "never")
        self.assertTrue(loaded.smart_case)
        self.assertEqual(stat.S_IMODE(os.stat(self.config_file).st_mode), 0o600)

    def test_partial_file_is_merged_with_defaults(self):
        self.config_file.write_text("hidden = true\n", encoding="utf-8")

        loaded = self.manager.load_config()

        self.assertTrue(loaded.hidden)
        self.assertEqual(loaded.context, 0)

    def test_malformed_file_raises_config_error(self):
        self.config_file.write_text("context = = 1\n", encoding="utf-8")

        with self.assertRaises(ConfigError):
            self.manager.load_config()

    def test_from_dict_drops_unknown_keys(self):
        config = Config.from_dict({"context": 5, "api_key": "nope"})
        self.assertEqual(config.context, 5)
        self.assertEqual(config.to_dict()["context"], 5)
        self.assertNotIn("api_key", config.to_dict())


if __name__ == "__main__":
    unittest.main()
