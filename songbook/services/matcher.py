"""Score a single song against a parsed query."""

import re

from songbook.core import fuzzy_match
from songbook.core.config import StringFilterThreshold, settings
from songbook.core.fuzzy_match import EXCLUDED, FuzzyScore
from songbook.domain.query import ParsedQuery
from songbook.domain.song import Song
from songbook.services.custom_list_service import CustomLists


_WHITESPACE = re.compile(r"\s+")


def _strip_whitespace(value: str) -> str:
    return _WHITESPACE.sub("", value)


def filter_bool(wanted: bool | None, actual: bool) -> bool:
    """A boolean filter passes when unset or equal to the song's value."""
    return wanted is None or wanted == actual


def filter_string(
    wanted: str | None,
    actual: str | None,
    *,
    threshold: StringFilterThreshold,
) -> bool:
    """Check a typed string filter (lang, genre, year) against a song field.

    Whitespace is ignored on both sides, so `genre:hiphop` matches "Hip Hop".

    Args:
        wanted: Filter value from the query, None when the query has no such filter
        actual: The song's field value, None when the song lacks it
        threshold: FULL requires every filter character in order, HALF half the attainable score

    Returns:
        True if the song passes the filter
    """
    if wanted is None:
        return True
    if actual is None:
        return False

    wanted = _strip_whitespace(wanted)
    score = fuzzy_match.compare(_strip_whitespace(actual), wanted)
    best = fuzzy_match.max_score(wanted)
    if threshold == StringFilterThreshold.HALF:
        return score >= best / 2
    return score == best


def match_score(
    song: Song,
    query: ParsedQuery,
    custom_lists: CustomLists,
    *,
    threshold: StringFilterThreshold | None = None,
) -> FuzzyScore:
    """Score a song against a query.

    Structural filters are checked first, cheapest first, and any failure
    excludes the song. Surviving songs score the best of their free-text matches,
    or 0 when the query has no free text.

    Args:
        song: Song to score
        query: Parsed search query
        custom_lists: Session custom list cache, consulted for `list:` filters
        threshold: String filter policy, defaults to the configured one

    Returns:
        The score, or EXCLUDED if the song fails a filter
    """
    threshold = threshold or settings.string_filter_threshold

    if not filter_bool(query.duet, song.is_duet) or not filter_bool(query.video, song.has_video):
        return EXCLUDED

    string_filters = (
        (query.language, song.language),
        (query.genre, song.genre),
        (query.year, song.year),
    )
    for wanted, actual in string_filters:
        if not filter_string(wanted, actual, threshold=threshold):
            return EXCLUDED

    if query.list is not None:
        members = custom_lists.members(query.list)
        if members is None or song.song_hash not in members:
            return EXCLUDED

    score: FuzzyScore = 0
    if query.plain is not None:
        score = max(
            fuzzy_match.compare(song.title, query.plain),
            fuzzy_match.compare(song.artist, query.plain),
        )
    if query.title is not None:
        score = max(score, fuzzy_match.compare(song.title, query.title))
    if query.artist is not None:
        score = max(score, fuzzy_match.compare(song.artist, query.artist))

    return score
