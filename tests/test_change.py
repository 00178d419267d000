from __future__ import annotations

import unittest

from diffstep.core.change import Change, ChangeKind, ChangeSpan


class ChangeSpanTests(unittest.TestCase):
    def test_factories(self) -> None:
        self.assertIs(ChangeSpan.equal("a").kind, ChangeKind.EQUAL)
        self.assertIs(ChangeSpan.insert("a").kind, ChangeKind.INSERT)
        self.assertIs(ChangeSpan.delete("a").kind, ChangeKind.DELETE)

        replaced = ChangeSpan.replace("old", "new")
        self.assertIs(replaced.kind, ChangeKind.REPLACE)
        self.assertEqual((replaced.text, replaced.new_text), ("old", "new"))

    def test_with_lines_returns_a_copy(self) -> None:
        span = ChangeSpan.delete("x")
        tagged = span.with_lines(4, None)

        self.assertEqual((tagged.old_line, tagged.new_line), (4, None))
        self.assertIsNone(span.old_line)

    def test_sides(self) -> None:
        self.assertEqual(ChangeSpan.insert("a").old_side(), "")
        self.assertEqual(ChangeSpan.insert("a").new_side(), "a")
        self.assertEqual(ChangeSpan.delete("a").old_side(), "a")
        self.assertEqual(ChangeSpan.delete("a").new_side(), "")
        self.assertEqual(ChangeSpan.replace("a", "b").old_side(), "a")
        self.assertEqual(ChangeSpan.replace("a", "b").new_side(), "b")
        self.assertFalse(ChangeSpan.equal("a").is_change())


class ChangeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.change = Change(
            id=3,
            spans=(
                ChangeSpan.equal("let "),
                ChangeSpan.delete("x"),
                ChangeSpan.insert("y"),
                ChangeSpan.equal(" = "),
                ChangeSpan.replace("1", "2"),
            ),
        )

    def test_text_reconstruction(self) -> None:
        self.assertEqual(self.change.old_text(), "let x = 1")
        self.assertEqual(self.change.new_text(), "let y = 2")

    def test_changes_skip_equal_spans(self) -> None:
        self.assertEqual(
            [span.kind for span in self.change.changes()],
            [ChangeKind.DELETE, ChangeKind.INSERT, ChangeKind.REPLACE],
        )
        self.assertTrue(self.change.has_changes())
        self.assertFalse(Change.single(0, ChangeSpan.equal("same")).has_changes())

    def test_with_description_keeps_original(self) -> None:
        described = self.change.with_description("rename x")
        self.assertEqual(described.description, "rename x")
        self.assertIsNone(self.change.description)
        self.assertEqual(described.spans, self.change.spans)

    def test_first_span(self) -> None:
        self.assertEqual(self.change.first_span.text, "let ")
        self.assertIsNone(Change(id=0, spans=()).first_span)


if __name__ == "__main__":
    unittest.main()
