"""Golf slang, club abbreviations and spoken-number tables used by the input normalizer."""

from __future__ import annotations

CLUB_ABBREVIATIONS: dict[str, str] = {
    **{f"{n}i": f"{n}-iron" for n in range(3, 10)},
    "pw": "pitching wedge",
    "gw": "gap wedge",
    "aw": "approach wedge",
    "sw": "sand wedge",
    "lw": "lob wedge",
    "3w": "3-wood",
    "5w": "5-wood",
    "7w": "7-wood",
    "d": "driver",
    **{f"{n}h": f"{n}-hybrid" for n in range(2, 6)},
}

COMMON_TERMS: dict[str, str] = {
    "stick": "club",
    "sticks": "clubs",
    "big stick": "driver",
    "big dog": "driver",
    "flat stick": "putter",
    "dance floor": "green",
    "putting surface": "green",
    "tin cup": "hole",
    "fairway metal": "fairway wood",
}

ONES: dict[str, int] = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
}

TEENS: dict[str, int] = {
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
    "thirteen": 13,
    "fourteen": 14,
    "fifteen": 15,
    "sixteen": 16,
    "seventeen": 17,
    "eighteen": 18,
    "nineteen": 19,
}

TENS: dict[str, int] = {
    "twenty": 20,
    "thirty": 30,
    "forty": 40,
    "fifty": 50,
    "sixty": 60,
    "seventy": 70,
    "eighty": 80,
    "ninety": 90,
}

NUMBER_WORDS: dict[str, str] = {
    **{word: str(value) for word, value in ONES.items()},
    **{word: str(value) for word, value in TEENS.items()},
    **{word: str(value) for word, value in TENS.items()},
    "hundred": "100",
}

PROFANITY: frozenset[str] = frozenset(
    {
        "fuck",
        "shit",
        "damn",
        "hell",
        "ass",
        "bitch",
        "crap",
        "piss",
        "bastard",
        "cock",
        "dick",
    }
)

PROFANITY_MASK = "****"

COMMON_ENGLISH_WORDS: frozenset[str] = frozenset(
    {
        "the", "a", "an", "my", "your", "i", "it", "to", "of", "in", "on", "for",
        "and", "or", "do", "should", "can", "me", "is", "are", "was", "were",
        "be", "been", "have", "has", "had", "how", "what", "where", "when",
        "why", "which", "this", "that", "today", "feel", "feels", "use",
        "club", "clubs", "iron", "wood", "driver", "wedge", "putter", "shot",
        "ball", "green", "fairway", "rough", "yard", "yards", "hole", "score",
        "round", "swing", "miss",
    }
)


def _tens_phrases() -> dict[str, int]:
    """Two-word numbers below one hundred: ``twenty one`` .. ``ninety nine``."""
    phrases: dict[str, int] = {}
    for tens_word, tens in TENS.items():
        for ones_word, ones in ONES.items():
            phrases[f"{tens_word} {ones_word}"] = tens + ones
    return phrases


def _build_compound_numbers() -> dict[str, str]:
    under_hundred: dict[str, int] = {**TEENS, **TENS, **_tens_phrases()}
    hundreds = {"a": 1, "one": 1, "two": 2, "three": 3, "four": 4}

    compounds: dict[str, str] = {
        phrase: str(value) for phrase, value in _tens_phrases().items()
    }
    for h_word, h in hundreds.items():
        compounds[f"{h_word} hundred"] = str(h * 100)
        for rest_word, rest in under_hundred.items():
            compounds[f"{h_word} hundred {rest_word}"] = str(h * 100 + rest)
            compounds[f"{h_word} hundred and {rest_word}"] = str(h * 100 + rest)
            # "one fifty", "two ten", "one fifty five"
            if h_word != "a":
                compounds[f"{h_word} {rest_word}"] = str(h * 100 + rest)
        for ones_word, ones in ONES.items():
            compounds[f"{h_word} hundred {ones_word}"] = str(h * 100 + ones)

    for word, n in ONES.items():
        if 2 <= n <= 9:
            compounds[f"{word} iron"] = f"{n}-iron"
        if 2 <= n <= 5:
            compounds[f"{word} hybrid"] = f"{n}-hybrid"
        if n in (3, 5, 7):
            compounds[f"{word} wood"] = f"{n}-wood"
    return compounds


COMPOUND_NUMBERS: dict[str, str] = _build_compound_numbers()
