from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from diffstep.core.diff import DiffEngine, FileReadError
from diffstep.core.multi import MultiFileDiff


def _sample() -> MultiFileDiff:
    return MultiFileDiff.from_texts(
        [
            ("a.txt", "one\ntwo\n", "one\nTWO\n"),
            ("b.txt", "x\n", "x\ny\nz\n"),
            ("c.txt", "same\n", "same\n"),
        ]
    )


class MultiFileDiffTests(unittest.TestCase):
    def test_entries_keep_input_order(self) -> None:
        multi = _sample()

        self.assertEqual(len(multi), 3)
        self.assertFalse(multi.is_empty())
        self.assertEqual([entry.display_name for entry in multi.files()], ["a.txt", "b.txt", "c.txt"])
        self.assertEqual(multi.current_index, 0)
        self.assertEqual(multi.current().display_name, "a.txt")

    def test_select_and_cycle(self) -> None:
        multi = _sample()

        self.assertTrue(multi.next_file())
        self.assertEqual(multi.current_index, 1)
        self.assertTrue(multi.next_file())
        self.assertFalse(multi.next_file())
        self.assertEqual(multi.current_index, 2)

        self.assertTrue(multi.select(0))
        self.assertFalse(multi.select(0))
        self.assertFalse(multi.select(7))
        self.assertFalse(multi.select(-1))
        self.assertFalse(multi.prev_file())
        self.assertEqual(multi.current_index, 0)

    def test_each_file_keeps_its_position(self) -> None:
        multi = _sample()
        multi.current_navigator().step_forward()
        multi.next_file()
        multi.current_navigator().goto_end()
        multi.prev_file()

        self.assertEqual(multi.current_navigator().active_index, 1)
        self.assertEqual(multi.entry(1).navigator.active_index, 2)

    def test_entry_out_of_range(self) -> None:
        multi = _sample()
        self.assertIsNone(multi.entry(3))
        self.assertIsNone(multi.entry(-1))

    def test_current_diff(self) -> None:
        multi = _sample()
        self.assertEqual(multi.current_diff().significant_changes, (1,))
        multi.select(2)
        self.assertTrue(multi.current_diff().is_empty())

    def test_totals(self) -> None:
        multi = _sample()
        self.assertEqual(multi.total_insertions(), 3)
        self.assertEqual(multi.total_deletions(), 1)

    def test_hunk_mode_applies_to_every_navigator(self) -> None:
        multi = MultiFileDiff.from_texts([("a", "a\n", "b\n")], hunk_mode=True)
        self.assertTrue(multi.current_navigator().state().hunk_preview_mode)

        multi = _sample()
        multi.set_hunk_preview_mode(True)
        self.assertTrue(all(entry.navigator.state().hunk_preview_mode for entry in multi.files()))

    def test_empty_composition(self) -> None:
        multi = MultiFileDiff()

        self.assertTrue(multi.is_empty())
        self.assertIsNone(multi.current())
        self.assertIsNone(multi.current_navigator())
        self.assertIsNone(multi.current_diff())
        self.assertFalse(multi.next_file())
        self.assertEqual(multi.total_insertions(), 0)

    def test_engine_setting_is_used(self) -> None:
        multi = MultiFileDiff.from_texts(
            [("a", "one\ntwo\n", "one\nTWO\n")],
            engine=DiffEngine().with_word_level(False),
        )
        self.assertEqual(multi.current_diff().significant_changes, (1, 2))


class FromPathsTests(unittest.TestCase):
    def test_builds_one_entry_per_pair(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "old.txt").write_text("a\nb\n", encoding="utf-8")
            (root / "new.txt").write_text("a\nc\n", encoding="utf-8")

            multi = MultiFileDiff.from_paths([(root / "old.txt", root / "new.txt")])

        self.assertEqual(len(multi), 1)
        self.assertEqual(multi.current().file_diff.old_path, str(root / "old.txt"))
        self.assertEqual(multi.current_diff().significant_changes, (1,))
        self.assertIsNone(multi.current().status)

    def test_read_failure_propagates(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            with self.assertRaises(FileReadError):
                MultiFileDiff.from_paths([(root / "missing-a", root / "missing-b")])


if __name__ == "__main__":
    unittest.main()
