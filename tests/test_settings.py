from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from diffstep.config.models import AppSettings, DiffSettings
from diffstep.config.store import SettingsStore, parse_setting_value


class SettingsStoreTests(unittest.TestCase):
    def test_load_save_update_roundtrip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "settings.json"
            store = SettingsStore(path)

            settings = store.load()
            self.assertTrue(path.exists())
            self.assertEqual(settings.schema_version, 1)
            self.assertTrue(settings.diff.word_level)

            updated = store.update("navigation.hunk_mode", True)
            self.assertTrue(updated.navigation.hunk_mode)

            reloaded = store.load()
            self.assertTrue(reloaded.navigation.hunk_mode)

    def test_unknown_keys_are_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = SettingsStore(Path(tmp) / "settings.json")
            with self.assertRaises(KeyError):
                store.update("nope.value", 1)
            with self.assertRaises(KeyError):
                store.update("diff.nope", 1)
            with self.assertRaises(KeyError):
                store.update("diff", {"word_level": False})

    def test_invalid_values_are_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = SettingsStore(Path(tmp) / "settings.json")
            with self.assertRaises(ValidationError):
                store.update("diff.context_lines", -4)

    def test_corrupt_file_is_backed_up(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "settings.json"
            path.write_text("{not json", encoding="utf-8")

            settings = SettingsStore(path).load()

            self.assertEqual(settings, AppSettings())
            backup = path.with_suffix(".corrupt.json")
            self.assertEqual(backup.read_text(encoding="utf-8"), "{not json")
            self.assertEqual(json.loads(path.read_text(encoding="utf-8"))["schema_version"], 1)

    def test_reset_restores_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = SettingsStore(Path(tmp) / "settings.json")
            store.update("animation.enabled", False)

            self.assertEqual(store.reset(), AppSettings())
            self.assertTrue(store.load().animation.enabled)

    def test_parse_setting_value(self) -> None:
        self.assertIs(parse_setting_value("false"), False)
        self.assertEqual(parse_setting_value("250"), 250)
        self.assertEqual(parse_setting_value("textual-light"), "textual-light")
        self.assertEqual(parse_setting_value('"quoted"'), "quoted")


class SettingsModelTests(unittest.TestCase):
    def test_diff_settings_build_engine_config(self) -> None:
        config = DiffSettings(word_level=False, context_lines=5).to_config()
        self.assertFalse(config.word_level)
        self.assertEqual(config.context_lines, 5)

    def test_setting_items_are_flattened(self) -> None:
        items = dict(AppSettings().setting_items())
        self.assertEqual(items["diff.word_level"], "True")
        self.assertEqual(items["animation.duration_ms"], "180")
        self.assertEqual(items["appearance.theme"], "textual-dark")


if __name__ == "__main__":
    unittest.main()
