"""Input normalization for free-form golf requests.

Pipeline (order is fixed):
  1. Spoken numbers: compound phrases ("one fifty", "seven iron") first,
     then single number words.
  2. Club abbreviations and golf slang, case-insensitive, whole tokens only.
  3. Profanity masking with a fixed-width mask.
  4. Punctuation/whitespace cleanup.

Every substitution is recorded so callers can audit what changed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from . import golf_slang

# Token boundaries: apostrophes and hyphens glue tokens together, so "I'd"
# and "7-iron" are never split into replaceable pieces.
_LEFT = r"(?<![\w'’-])"
_RIGHT = r"(?![\w'’-])"

_PUNCT_RUN_RE = re.compile(r"([.!?,;:])\1+")
_SPACE_RUN_RE = re.compile(r"\s+")
_WORD_RE = re.compile(r"[a-z']+")


class ModificationKind(str, Enum):
    SLANG = "slang"
    NUMBER = "number"
    PROFANITY = "profanity"
    WHITESPACE = "whitespace"


@dataclass(frozen=True)
class Modification:
    kind: ModificationKind
    original: str
    replacement: str


@dataclass(frozen=True)
class NormalizationResult:
    normalized_text: str
    original_text: str
    was_modified: bool
    modifications: tuple[Modification, ...] = field(default_factory=tuple)


def _phrase_pattern(table: dict[str, str]) -> re.Pattern[str]:
    """Alternation over *table* keys, longest phrase first.

    Multi-word keys accept any whitespace or a hyphen between words.
    """
    keys = sorted(table, key=lambda k: (-len(k), k))
    alternatives = [r"[\s-]+".join(re.escape(part) for part in key.split()) for key in keys]
    return re.compile(_LEFT + "(?:" + "|".join(alternatives) + ")" + _RIGHT, re.IGNORECASE)


def _lookup_key(matched: str) -> str:
    return " ".join(re.split(r"[\s-]+", matched.lower().strip()))


_COMPOUND_RE = _phrase_pattern(golf_slang.COMPOUND_NUMBERS)
_NUMBER_WORD_RE = _phrase_pattern(golf_slang.NUMBER_WORDS)
_SLANG_TABLE = {**golf_slang.COMMON_TERMS, **golf_slang.CLUB_ABBREVIATIONS}
_SLANG_RE = _phrase_pattern(_SLANG_TABLE)
_PROFANITY_RE = re.compile(
    _LEFT
    + "(?:"
    + "|".join(sorted(golf_slang.PROFANITY, key=len, reverse=True))
    + r")(?:s|es|ed|er|ers|ing|ty|y)?"
    + _RIGHT,
    re.IGNORECASE,
)


class InputNormalizer:
    """Stateless; one instance can be shared freely."""

    def normalize(self, text: str) -> NormalizationResult:
        original = text or ""
        if not original:
            return NormalizationResult(normalized_text="", original_text="", was_modified=False)

        modifications: list[Modification] = []
        result = original
        result = self._substitute(result, _COMPOUND_RE, golf_slang.COMPOUND_NUMBERS, ModificationKind.NUMBER, modifications)
        result = self._substitute(result, _NUMBER_WORD_RE, golf_slang.NUMBER_WORDS, ModificationKind.NUMBER, modifications)
        result = self._substitute(result, _SLANG_RE, _SLANG_TABLE, ModificationKind.SLANG, modifications)
        result = self._mask_profanity(result, modifications)
        result = self._cleanup(result, modifications)

        return NormalizationResult(
            normalized_text=result,
            original_text=original,
            was_modified=bool(modifications) or result != original,
            modifications=tuple(modifications),
        )

    def is_english(self, text: str) -> bool:
        """Cheap heuristic: short inputs pass, longer ones need some common words."""
        words = _WORD_RE.findall((text or "").lower())
        if len(words) <= 2:
            return True
        common = sum(1 for w in words if w in golf_slang.COMMON_ENGLISH_WORDS)
        return common / len(words) >= 0.1

    @staticmethod
    def _substitute(
        text: str,
        pattern: re.Pattern[str],
        table: dict[str, str],
        kind: ModificationKind,
        modifications: list[Modification],
    ) -> str:
        def _replace(match: re.Match[str]) -> str:
            matched = match.group(0)
            replacement = table.get(_lookup_key(matched))
            if replacement is None or replacement == matched:
                return matched
            modifications.append(Modification(kind, matched, replacement))
            return replacement

        return pattern.sub(_replace, text)

    @staticmethod
    def _mask_profanity(text: str, modifications: list[Modification]) -> str:
        def _replace(match: re.Match[str]) -> str:
            modifications.append(Modification(ModificationKind.PROFANITY, match.group(0), golf_slang.PROFANITY_MASK))
            return golf_slang.PROFANITY_MASK

        return _PROFANITY_RE.sub(_replace, text)

    @staticmethod
    def _cleanup(text: str, modifications: list[Modification]) -> str:
        cleaned = _PUNCT_RUN_RE.sub(r"\1", text)
        cleaned = _SPACE_RUN_RE.sub(" ", cleaned).strip()
        if cleaned != text:
            modifications.append(Modification(ModificationKind.WHITESPACE, text, cleaned))
        return cleaned


_default_normalizer = InputNormalizer()


def normalize(text: str) -> NormalizationResult:
    return _default_normalizer.normalize(text)


def is_english(text: str) -> bool:
    return _default_normalizer.is_english(text)
