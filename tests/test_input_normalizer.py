"""Tests for input normalization.

Covers:
- Club abbreviation and slang expansion (whole tokens only)
- Spoken numbers: compound phrases before single words
- Profanity masking
- Punctuation/whitespace cleanup
- Idempotency of normalization
- English heuristic
"""

import unittest

import pytest

from navcaddy.services.input_normalizer import InputNormalizer, ModificationKind, is_english, normalize


class ClubAndSlangTests(unittest.TestCase):
    def setUp(self):
        self.normalizer = InputNormalizer()

    def test_iron_abbreviation(self):
        result = self.normalizer.normalize("My 7i feels long today")
        self.assertEqual(result.normalized_text, "My 7-iron feels long today")
        self.assertTrue(result.was_modified)
        self.assertIn(ModificationKind.SLANG, [m.kind for m in result.modifications])

    def test_wedges_and_woods(self):
        result = self.normalizer.normalize("pw or sw from here, maybe 3w off the tee")
        self.assertEqual(result.normalized_text, "pitching wedge or sand wedge from here, maybe 3-wood off the tee")

    def test_case_insensitive(self):
        self.assertEqual(self.normalizer.normalize("Hit the 5H").normalized_text, "Hit the 5-hybrid")

    def test_longest_slang_phrase_wins(self):
        self.assertEqual(self.normalizer.normalize("pull the big stick").normalized_text, "pull the driver")
        self.assertEqual(self.normalizer.normalize("grab a stick").normalized_text, "grab a club")

    def test_apostrophe_tokens_untouched(self):
        result = self.normalizer.normalize("I'd hit d here")
        self.assertEqual(result.normalized_text, "I'd hit driver here")

    def test_abbreviation_inside_word_untouched(self):
        result = self.normalizer.normalize("swing speed")
        self.assertEqual(result.normalized_text, "swing speed")
        self.assertFalse(result.was_modified)


class NumberTests(unittest.TestCase):
    def setUp(self):
        self.normalizer = InputNormalizer()

    def test_compound_before_simple(self):
        result = self.normalizer.normalize("what club for one fifty")
        self.assertEqual(result.normalized_text, "what club for 150")
        numbers = [m for m in result.modifications if m.kind is ModificationKind.NUMBER]
        self.assertEqual(len(numbers), 1)
        self.assertEqual(numbers[0].original, "one fifty")
        self.assertEqual(numbers[0].replacement, "150")

    def test_hyphenated_number(self):
        self.assertEqual(self.normalizer.normalize("twenty-five yards").normalized_text, "25 yards")

    def test_spoken_club(self):
        self.assertEqual(self.normalizer.normalize("seven iron feels long").normalized_text, "7-iron feels long")

    def test_hundreds(self):
        self.assertEqual(self.normalizer.normalize("one hundred fifty five out").normalized_text, "155 out")
        self.assertEqual(self.normalizer.normalize("about a hundred").normalized_text, "about 100")

    def test_single_words(self):
        self.assertEqual(self.normalizer.normalize("hole nine").normalized_text, "hole 9")


class ProfanityAndCleanupTests(unittest.TestCase):
    def setUp(self):
        self.normalizer = InputNormalizer()

    def test_profanity_masked_with_fixed_width(self):
        result = self.normalizer.normalize("that damn slice again")
        self.assertEqual(result.normalized_text, "that **** slice again")
        self.assertEqual(result.modifications[0].kind, ModificationKind.PROFANITY)

    def test_profanity_not_matched_inside_words(self):
        result = self.normalizer.normalize("hello class")
        self.assertEqual(result.normalized_text, "hello class")

    def test_repeated_punctuation_and_spaces(self):
        result = self.normalizer.normalize("  what   club???  ")
        self.assertEqual(result.normalized_text, "what club?")
        self.assertEqual(result.modifications[-1].kind, ModificationKind.WHITESPACE)

    def test_empty_input(self):
        result = self.normalizer.normalize("")
        self.assertEqual(result.normalized_text, "")
        self.assertFalse(result.was_modified)

    def test_whitespace_only_input(self):
        result = self.normalizer.normalize("   ")
        self.assertEqual(result.normalized_text, "")
        self.assertTrue(result.was_modified)


@pytest.mark.parametrize(
    "text",
    [
        "My 7i feels long today",
        "one fifty to the pin!!!",
        "  big dog   off the tee,, damn it  ",
        "I'd go d... or 3w?",
        "twenty-five yards, sw from the dance floor",
        "What the hell is wrong with my pw",
        "",
        "   ",
        "****",
        "no one knows",
    ],
)
def test_normalization_is_idempotent(text):
    first = normalize(text)
    second = normalize(first.normalized_text)
    assert second.was_modified is False
    assert second.normalized_text == first.normalized_text


def test_is_english_short_inputs_pass():
    assert is_english("")
    assert is_english("7-iron")
    assert is_english("hola amigo")


def test_is_english_heuristic():
    assert is_english("what club should I hit from the rough")
    assert not is_english("quiero saber cuanto mide este hoyo exactamente")
