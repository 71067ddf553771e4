from __future__ import annotations

import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from pikchrfilter.config import RenderFlags, RunConfig
from pikchrfilter.modifiers import resolve_modifiers


class ResolveModifiersTests(unittest.TestCase):
    def test_defaults(self) -> None:
        decision = resolve_modifiers(b".PS\n", RunConfig())
        self.assertFalse(decision.layout_bare)
        self.assertFalse(decision.requote)
        self.assertFalse(decision.include_delimiters)
        self.assertFalse(decision.wrap_in_details)
        self.assertFalse(decision.details_open)
        self.assertEqual(decision.render_flags, RenderFlags.NONE)
        self.assertTrue(decision.included)
        self.assertEqual(decision.number, 1)

    def test_bare_words_and_default(self) -> None:
        self.assertTrue(resolve_modifiers("```pikchr bare-svg\n", RunConfig()).layout_bare)
        self.assertTrue(resolve_modifiers("```pikchr svg-only\n", RunConfig()).layout_bare)
        self.assertTrue(resolve_modifiers("```pikchr\n", RunConfig(bare=True)).layout_bare)
        self.assertFalse(resolve_modifiers("```pikchr svg-only-ish\n", RunConfig()).layout_bare)

    def test_requote_hierarchy(self) -> None:
        decision = resolve_modifiers(".PS requote delimiters details open\n", RunConfig())
        self.assertTrue(decision.requote)
        self.assertTrue(decision.include_delimiters)
        self.assertTrue(decision.wrap_in_details)
        self.assertTrue(decision.details_open)

    def test_dependents_need_requote(self) -> None:
        decision = resolve_modifiers(".PS delimiters details open\n", RunConfig(details_all=True))
        self.assertFalse(decision.requote)
        self.assertFalse(decision.include_delimiters)
        self.assertFalse(decision.wrap_in_details)
        self.assertFalse(decision.details_open)

    def test_open_needs_details(self) -> None:
        decision = resolve_modifiers(".PS open requote\n", RunConfig())
        self.assertTrue(decision.requote)
        self.assertFalse(decision.details_open)

    def test_run_wide_requote_and_details(self) -> None:
        decision = resolve_modifiers(".PS open\n", RunConfig(requote_all=True, details_all=True))
        self.assertTrue(decision.requote)
        self.assertTrue(decision.wrap_in_details)
        self.assertTrue(decision.details_open)

    def test_flags(self) -> None:
        config = RunConfig(dark_mode=True, plaintext_errors=True)
        decision = resolve_modifiers(".PS x-current-color\n", config)
        self.assertEqual(
            decision.render_flags,
            RenderFlags.DARK_MODE | RenderFlags.PLAINTEXT_ERRORS | RenderFlags.CURRENTCOLOR_FOR_BLACK,
        )
        self.assertEqual(resolve_modifiers(".PS\n", config).render_flags, RenderFlags.DARK_MODE | RenderFlags.PLAINTEXT_ERRORS)
        self.assertEqual(
            resolve_modifiers(".PS\n", RunConfig(current_color=True)).render_flags,
            RenderFlags.CURRENTCOLOR_FOR_BLACK,
        )

    def test_non_ascii_space_does_not_split_words(self) -> None:
        decision = resolve_modifiers(b".PS note\xc2\xa0requote\n", RunConfig())
        self.assertFalse(decision.requote)
        self.assertFalse(resolve_modifiers(".PS \u00a0svg-only\n", RunConfig()).layout_bare)

    def test_modifier_filter(self) -> None:
        config = RunConfig(only_modifier="figure-2")
        self.assertTrue(resolve_modifiers(".PS figure-2\n", config).included)
        self.assertFalse(resolve_modifiers(".PS figure-21\n", config).included)
        self.assertFalse(resolve_modifiers(".PS\n", config).included)

    def test_number_filter(self) -> None:
        config = RunConfig(only_number=2)
        self.assertFalse(resolve_modifiers(".PS\n", config, 1).included)
        self.assertTrue(resolve_modifiers(".PS\n", config, 2).included)
        self.assertFalse(resolve_modifiers(".PS\n", config, 3).included)

    def test_diagrams_removed(self) -> None:
        config = RunConfig(include_diagrams=False, only_modifier="keep")
        self.assertFalse(resolve_modifiers(".PS keep\n", config).included)

    def test_conflicting_filters_rejected(self) -> None:
        with self.assertRaises(ValueError):
            RunConfig(only_modifier="a", only_number=1)
        with self.assertRaises(ValueError):
            RunConfig(only_number=0)


if __name__ == "__main__":
    unittest.main()
