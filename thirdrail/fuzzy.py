"""Fuzzy subsequence matching with scores that favour word starts and runs."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

_FIRST_CHAR_MATCH_BONUS = 10
_MATCH_FOLLOWING_SEPARATOR_BONUS = 20
_CAMEL_CASE_MATCH_BONUS = 20
_ADJACENT_MATCH_BONUS = 5
_UNMATCHED_LEADING_CHAR_PENALTY = -5
_MAX_UNMATCHED_LEADING_CHAR_PENALTY = -15

_SEPARATORS = frozenset("/-_ .\\")


@dataclass
class Match:
    """A candidate that contains the pattern as a subsequence."""

    string: str
    index: int
    matched_indexes: list[int] = field(default_factory=list)
    score: int = 0


def _fold_equal(a: str, b: str) -> bool:
    return a == b or a.lower() == b.lower() or a.upper() == b.upper()


def _match(pattern: str, text: str, index: int) -> Match | None:
    matched: list[int] = []
    total = 0
    pattern_index = 0
    best = -1
    matched_index = -1
    adjacent_bonus = 0
    last = ""
    last_index = 0
    length = len(text)

    for position, char in enumerate(text):
        if _fold_equal(char, pattern[pattern_index]):
            score = 0
            if position == 0:
                score += _FIRST_CHAR_MATCH_BONUS
            if last.islower() and char.isupper():
                score += _CAMEL_CASE_MATCH_BONUS
            if position != 0 and last in _SEPARATORS:
                score += _MATCH_FOLLOWING_SEPARATOR_BONUS
            if matched:
                bonus = adjacent_bonus * 2 + _ADJACENT_MATCH_BONUS if matched[-1] == last_index else 0
                score += bonus
                adjacent_bonus += bonus
            if score > best:
                best = score
                matched_index = position

        next_pattern = pattern[pattern_index + 1] if pattern_index < len(pattern) - 1 else ""
        next_char = text[position + 1] if position + 1 < length else ""
        # Commit the best position once the next pattern character is coming up
        # or the candidate has ended, so later and better positions are still found.
        if next_char == "" or (next_pattern and _fold_equal(next_pattern, next_char)):
            if matched_index > -1:
                if not matched:
                    best += max(
                        matched_index * _UNMATCHED_LEADING_CHAR_PENALTY,
                        _MAX_UNMATCHED_LEADING_CHAR_PENALTY,
                    )
                total += best
                matched.append(matched_index)
                best = -1
                pattern_index += 1

        last_index = position
        last = char

    total += len(matched) - length
    if len(matched) != len(pattern):
        return None
    return Match(string=text, index=index, matched_indexes=matched, score=total)


def find(pattern: str, candidates: Iterable[str]) -> list[Match]:
    """Return the candidates matching ``pattern``, best score first.

    Candidates with equal scores keep their original order.
    """
    if not pattern:
        return []
    matches = [
        found
        for index, text in enumerate(candidates)
        if (found := _match(pattern, text, index)) is not None
    ]
    matches.sort(key=lambda m: m.score, reverse=True)
    return matches