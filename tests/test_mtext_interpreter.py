#!/usr/bin/env python3
"""MTEXT interpreter tests.

Tests:
  1. Plain text, paragraphs, first-run anchor
  2. Scopes: braces, underline/overstrike/strikethrough toggles
  3. Style codes: font, height, width, color, alignment, oblique
  4. Stacking and unicode escapes
  5. Malformed markup fallback
"""

import os
import sys
import unittest

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'scripts'))
from _mtext import (
    TextRun, convert_mtext, estimate_text_length, interpret, tokenize,
)


def _values(runs):
    return [r.value for r in runs]


class TestPlainText(unittest.TestCase):

    def test_plain_string_is_one_run(self):
        runs = interpret("Hello world", 1.0, 2.0, 2.5)
        self.assertEqual(_values(runs), ["Hello world"])
        self.assertEqual((runs[0].x, runs[0].y), (1.0, 2.0))
        self.assertIsNone(runs[0].dy)

    def test_empty_text_gives_single_empty_run_at_anchor(self):
        runs = interpret("", 3.0, 4.0, 1.0)
        self.assertEqual(len(runs), 1)
        self.assertEqual(runs[0].value, "")
        self.assertEqual((runs[0].x, runs[0].y), (3.0, 4.0))

    def test_paragraphs(self):
        runs = interpret("A\\PB\\PC", 10.0, 20.0, 2.5)
        self.assertEqual(_values(runs), ["A", "B", "C"])
        self.assertEqual((runs[0].x, runs[0].y), (10.0, 20.0))
        for run in runs[1:]:
            self.assertAlmostEqual(run.dy, 3.0)
            self.assertEqual(run.x, 10.0)
            self.assertIsNone(run.y)

    def test_caret_j_is_a_line_break(self):
        runs = interpret("A^JB", 0.0, 0.0, 1.0)
        self.assertEqual(_values(runs), ["A", "B"])

    def test_lone_caret_is_text(self):
        runs = interpret("x^2", 0.0, 0.0, 1.0)
        self.assertEqual(_values(runs), ["x^2"])

    def test_only_first_run_has_absolute_y(self):
        runs = interpret("a{\\C1;b}c\\Pd", 0.0, 0.0, 1.0)
        self.assertIsNotNone(runs[0].y)
        self.assertTrue(all(r.y is None for r in runs[1:]))


class TestScopes(unittest.TestCase):

    def test_font_group_is_one_run(self):
        runs = interpret("{\\fArial|b1|i0|c0|p34;1 %}", 0.0, 0.0, 2.5)
        self.assertEqual(len(runs), 1)
        self.assertEqual(runs[0].value, "1 %")
        self.assertEqual(runs[0].font_family, "Arial")
        self.assertTrue(runs[0].bold)
        self.assertFalse(runs[0].italic)

    def test_font_group_inside_text(self):
        runs = interpret("Slope is {\\fArial|b1|i0|c0|p34;1 %}.", 0.0, 0.0, 2.5)
        self.assertEqual(_values(runs), ["Slope is ", "1 %", "."])
        self.assertTrue(runs[1].bold)
        self.assertFalse(runs[2].bold, "closing brace must restore the parent style")
        self.assertEqual(runs[1].parent_scope, 0)

    def test_underline_toggle(self):
        runs = interpret("This is \\Lunderline\\l text.", 0.0, 0.0, 2.5)
        self.assertEqual(_values(runs), ["This is ", "underline", " text."])
        self.assertEqual([r.underline for r in runs], [False, True, False])

    def test_overstrike_and_strikethrough(self):
        runs = interpret("\\Oover\\o \\Kstrike\\k", 0.0, 0.0, 1.0)
        self.assertEqual(_values(runs), ["over", " ", "strike"])
        self.assertTrue(runs[0].overstrike)
        self.assertFalse(runs[1].overstrike)
        self.assertTrue(runs[2].strikethrough)

    def test_close_toggle_without_open_is_ignored(self):
        runs = interpret("abc\\ldef", 0.0, 0.0, 1.0)
        self.assertEqual(_values(runs), ["abcdef"])

    def test_unmatched_closing_brace_is_noop(self):
        runs = interpret("a}b", 0.0, 0.0, 1.0)
        self.assertEqual(_values(runs), ["ab"])

    def test_trailing_close_adds_no_run(self):
        runs = interpret("{a}", 0.0, 0.0, 1.0)
        self.assertEqual(_values(runs), ["a"])

    def test_escaped_braces_are_text(self):
        runs = interpret("a\\{b\\}", 0.0, 0.0, 1.0)
        self.assertEqual(_values(runs), ["a{b}"])


class TestStyleCodes(unittest.TestCase):

    def test_font_fallback_and_italic(self):
        runs = interpret("\\fStandard|b0|i1|c0|p0;x", 0.0, 0.0, 1.0)
        self.assertEqual(runs[0].font_family, "Arial")
        self.assertTrue(runs[0].italic)

    def test_absolute_height_uses_legibility_factor(self):
        runs = interpret("\\H2;x", 0.0, 0.0, 2.5)
        self.assertAlmostEqual(runs[0].font_size, 1.84)

    def test_relative_height_uses_base_size(self):
        runs = interpret("\\H2x;x", 0.0, 0.0, 2.5)
        self.assertAlmostEqual(runs[0].font_size, 5.0)

    def test_relative_height_uses_inherited_size(self):
        runs = interpret("{\\H2;a{\\H0.5x;b}}", 0.0, 0.0, 2.5)
        self.assertEqual(_values(runs), ["a", "b"])
        self.assertAlmostEqual(runs[0].font_size, 1.84)
        self.assertAlmostEqual(runs[1].font_size, 0.92)

    def test_style_code_after_text_starts_new_run(self):
        runs = interpret("ab\\H2;cd", 0.0, 0.0, 1.0)
        self.assertEqual(_values(runs), ["ab", "cd"])
        self.assertIsNone(runs[0].font_size)

    def test_width(self):
        self.assertAlmostEqual(interpret("\\W0.8;a", 0, 0, 1)[0].width_factor, 0.8)
        self.assertAlmostEqual(interpret("\\W2x;a", 0, 0, 1)[0].width_factor, 2.0)

    def test_color(self):
        self.assertEqual(interpret("\\C1;red", 0, 0, 1)[0].fill, "red")
        self.assertEqual(interpret("\\C5;x", 0, 0, 1)[0].fill, "blue")

    def test_lowercase_color_is_noop(self):
        runs = interpret("\\c1;x", 0, 0, 1)
        self.assertEqual(_values(runs), ["x"])
        self.assertIsNone(runs[0].fill)

    def test_alignment(self):
        self.assertEqual(interpret("\\A1;x", 0, 0, 1)[0].alignment, "center")
        self.assertEqual(interpret("\\A2;x", 0, 0, 1)[0].alignment, "right")
        self.assertEqual(interpret("\\A5;x", 0, 0, 1)[0].alignment, "left")

    def test_oblique(self):
        self.assertAlmostEqual(interpret("\\Q15;x", 0, 0, 1)[0].slant_angle, 15.0)

    def test_non_positive_height_is_ignored(self):
        for code in ("\\H0;", "\\H-2;", "\\H0x;"):
            runs = interpret(code + "ab", 0.0, 0.0, 1.0)
            self.assertEqual(_values(runs), ["ab"])
            self.assertIsNone(runs[0].font_size)


class TestStackAndUnicode(unittest.TestCase):

    def test_vertical_stack(self):
        runs = interpret("x\\S1^2;", 0.0, 0.0, 1.0)
        self.assertEqual(_values(runs), ["x", "1", "2"])
        self.assertAlmostEqual(runs[1].dy, -1.0)
        self.assertAlmostEqual(runs[2].dy, 1.0)
        self.assertAlmostEqual(runs[2].dx, estimate_text_length("1", 1.0))

    def test_caret_stack_keeps_slashes_in_both_parts(self):
        runs = interpret("\\S+1/4^-1/8;", 0.0, 0.0, 1.0)
        self.assertEqual(_values(runs), ["+1/4", "-1/8"])
        self.assertAlmostEqual(runs[1].dx, estimate_text_length("+1/4", 1.0))
        self.assertAlmostEqual(runs[1].dy, 1.0)

    def test_text_after_stack_starts_new_run(self):
        runs = interpret("x\\S1^2;y", 0.0, 0.0, 1.0)
        self.assertEqual(_values(runs), ["x", "1", "2", "y"])

    def test_slash_and_hash_stacks_are_inline(self):
        self.assertEqual(_values(interpret("\\S1/2;", 0, 0, 1)), ["1/2"])
        self.assertEqual(_values(interpret("a\\S3#4;b", 0, 0, 1)), ["a3/4b"])

    def test_zero_tolerance_stack_is_two_runs(self):
        runs = interpret("\\S+0^-0;", 0.0, 0.0, 2.5)
        self.assertEqual(_values(runs), ["+0", "-0"])

    def test_unicode_appends_to_last_run(self):
        self.assertEqual(_values(interpret("\\U+2205", 0, 0, 1)), ["∅"])
        runs = interpret("{a}\\U+00B1", 0, 0, 1)
        self.assertEqual(_values(runs), ["a±"])


class TestTokenizer(unittest.TestCase):

    def test_longest_match_wins(self):
        kinds = [k for k, _, _ in tokenize("\\H2.5x;ab")]
        self.assertEqual(kinds, ["height", "text"])

    def test_malformed_ends_stream(self):
        tokens = list(tokenize("ab\\Zcd\\P"))
        self.assertEqual(tokens[-1][0], "malformed")
        self.assertEqual(tokens[-1][1], "\\Zcd\\P")


def test_malformed_remainder_is_one_unstyled_run(capsys):
    runs = interpret("{\\fArial|b1|i0|c0|p0;a\\Zb}", 0.0, 0.0, 1.0)
    assert [r.value for r in runs] == ["a", "\\Zb}"]
    assert runs[0].bold
    assert not runs[1].bold
    assert runs[1].font_family is None
    assert "[MTEXT]" in capsys.readouterr().err


def test_unterminated_code_is_malformed():
    runs = interpret("size \\H2", 0.0, 0.0, 1.0)
    assert [r.value for r in runs] == ["size \\H2"]


@pytest.mark.parametrize("text", [
    "C:\\temp",
    "\\temp",
    "a\\b",
    "50\\% off",
    "trailing\\",
    "x\\y\\z",
])
def test_stray_backslash_in_plain_text_is_one_run(text):
    runs = interpret(text, 0.0, 0.0, 1.0)
    assert [r.value for r in runs] == [text]
    assert runs[0].x == 0.0 and runs[0].y == 0.0


def test_convert_mtext_flips_y_and_breaks_newlines():
    runs = convert_mtext("A\nB", 1.0, 2.0, 2.0)
    assert [r.value for r in runs] == ["A", "B"]
    assert runs[0].y == -2.0
    assert runs[1].dy == pytest.approx(2.4)


def test_convert_mtext_empty():
    assert convert_mtext("", 0.0, 0.0, 1.0) == []


def test_estimate_text_length():
    assert estimate_text_length("abc", 2.0) == pytest.approx(3.6)


def test_to_dict_omits_unset_fields():
    d = TextRun(value="a").to_dict()
    assert d["value"] == "a"
    assert "x" not in d
    assert "font_size" not in d
    assert d["bold"] is False


if __name__ == "__main__":
    unittest.main()
