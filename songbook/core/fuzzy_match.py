"""Greedy in-order fuzzy matching used to rank songs against a search string.

Every character of the search string is looked up in the target, scanning
forward from just past the previous match. A character found immediately at
the cursor earns 3 points, one found after skipping characters earns 2, and a
character that cannot be found earns nothing and leaves the cursor in place.
Comparison is case-insensitive and ignores diacritics, so "André" and "andre"
match character for character.

Matching is per character: a character that expands to several letters, such
as "ß", only matches itself, so "Straße" and "strasse" score the "ss" as
missing.
"""

from functools import lru_cache
from typing import NamedTuple

from unidecode import unidecode


FuzzyScore = int

# Score reserved for records removed by a filter. Every real score is >= 0.
EXCLUDED: FuzzyScore = -1

ADJACENT_POINTS = 3
SKIPPED_POINTS = 2


class FuzzyMatch(NamedTuple):
    """Score of a comparison plus the (search index, target index) pairs that matched."""

    score: FuzzyScore
    matches: tuple[tuple[int, int], ...]


@lru_cache(maxsize=8192)
def _fold(char: str) -> str:
    """Lowercase form of a single character with any accent removed.

    Only characters that transliterate to one ASCII letter are folded, so
    distinct characters sharing a romanisation (e.g. CJK) stay distinct.
    """
    folded = unidecode(char)
    if len(folded) == 1 and folded.isascii() and folded.isalpha():
        return folded.lower()
    return char.casefold()


def compare_with_matches(target: str, search: str) -> FuzzyMatch:
    """Compare a target string to a user-entered search.

    Args:
        target: String being searched, e.g. a song title
        search: What the user typed

    Returns:
        FuzzyMatch with the score and the character correspondences
    """
    folded_target = [_fold(char) for char in target]
    cursor = 0
    score = 0
    matches: list[tuple[int, int]] = []

    for search_index, char in enumerate(search):
        wanted = _fold(char)
        for target_index in range(cursor, len(folded_target)):
            if folded_target[target_index] == wanted:
                score += ADJACENT_POINTS if target_index == cursor else SKIPPED_POINTS
                matches.append((search_index, target_index))
                cursor = target_index + 1
                break

    return FuzzyMatch(score=score, matches=tuple(matches))


def compare(target: str, search: str) -> FuzzyScore:
    """Score how well `search` matches `target`; higher is better, 0 for an empty search."""
    return compare_with_matches(target, search).score


def max_score(search: str) -> FuzzyScore:
    """Best score attainable by `search`, i.e. its score against itself."""
    return compare(search, search)
