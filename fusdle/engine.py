"""
Pure guess evaluation (no HTTP, no storage).

A guess is compared with the puzzle answer in stages; the first stage that
decides returns:
- exact: same text once lowercased and with every space removed
- wrong-order: same words, different order (multi-word answers only)
- exact-word: one guess word appears as a whole word in the answer
- substring: one guess word contains / is contained in an answer word
- none: nothing identified, so no feedback at all

Word length floors keep short words like "a", "to", "of" from ever
counting as a match. They are fixed constants, not tuned from data.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from .types import MatchType

PRIMARY_WORD_MIN_LENGTH = 4
MATCH_WORD_MIN_LENGTH = 3

WRONG_ORDER_FEEDBACK = "So close! You have all the right words, but in the wrong order."
PARTIAL_FEEDBACK = 'You\'re on the right track! Your guess contains "{word}".'

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class GuessVerdict:
    is_correct: bool
    match_type: MatchType
    matched_word: Optional[str] = None
    feedback_message: Optional[str] = None

    @property
    def is_partial(self) -> bool:
        return not self.is_correct and self.match_type != "none"


NO_MATCH = GuessVerdict(is_correct=False, match_type="none")


def normalize_answer(text: str) -> str:
    """Lowercase and drop all whitespace: "Brain Storm" -> "brainstorm"."""
    return _WHITESPACE_RE.sub("", text.lower())


def split_words(text: str) -> List[str]:
    """Lowercased words; runs of whitespace never produce empty words."""
    return text.lower().split()


def _partial(match_type: MatchType, word: str) -> GuessVerdict:
    return GuessVerdict(
        is_correct=False,
        match_type=match_type,
        matched_word=word,
        feedback_message=PARTIAL_FEEDBACK.format(word=word),
    )


def _find_exact_word(guess_words: List[str], answer_words: List[str]) -> Optional[str]:
    # Primary (long) answer words get the first pass
    primary_words = {w for w in answer_words if len(w) >= PRIMARY_WORD_MIN_LENGTH}
    for word in guess_words:
        if len(word) >= PRIMARY_WORD_MIN_LENGTH and word in primary_words:
            return word

    for word in guess_words:
        if len(word) >= MATCH_WORD_MIN_LENGTH and word in answer_words:
            return word
    return None


def _find_substring(guess_words: List[str], answer_words: List[str]) -> Optional[str]:
    for guess_word in guess_words:
        if len(guess_word) < MATCH_WORD_MIN_LENGTH:
            continue
        for answer_word in answer_words:
            if len(answer_word) < PRIMARY_WORD_MIN_LENGTH:
                continue
            if guess_word in answer_word or answer_word in guess_word:
                return guess_word
    return None


def evaluate(guess: str, answer: str) -> GuessVerdict:
    """
    Example:
      evaluate("brain storm", "Brainstorm")         -> exact, correct
      evaluate("Peanut Cup Butter", "Peanut Butter Cup") -> wrong-order
      evaluate("banana", "Liger")                    -> none

    Never raises; an empty guess or answer is simply "none".
    """
    normalized_guess = normalize_answer(guess)
    normalized_answer = normalize_answer(answer)
    if not normalized_guess or not normalized_answer:
        return NO_MATCH

    # 1. Exact match, ignoring case and spacing
    if normalized_guess == normalized_answer:
        return GuessVerdict(is_correct=True, match_type="exact")

    guess_words = split_words(guess)
    answer_words = split_words(answer)

    # 2. Right words, wrong order (must come before any weaker hit)
    if (
        len(answer_words) > 1
        and len(guess_words) == len(answer_words)
        and sorted(guess_words) == sorted(answer_words)
    ):
        return GuessVerdict(
            is_correct=False,
            match_type="wrong-order",
            feedback_message=WRONG_ORDER_FEEDBACK,
        )

    # 3. Whole-word hit
    word = _find_exact_word(guess_words, answer_words)
    if word is not None:
        return _partial("exact-word", word)

    # 4. Substring hit
    word = _find_substring(guess_words, answer_words)
    if word is not None:
        return _partial("substring", word)

    # 5. Nothing identified -> no feedback
    return NO_MATCH
