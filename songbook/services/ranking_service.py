"""Rank the whole catalog against a query.

Every pass rescans the complete catalog; there is no index and no incremental
refiltering of a previous result.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from random import Random

from songbook.core.config import StringFilterThreshold
from songbook.core.fuzzy_match import EXCLUDED
from songbook.core.logging import span
from songbook.domain.query import ParsedQuery
from songbook.domain.song import Song
from songbook.services.custom_list_service import CustomLists
from songbook.services.matcher import match_score


logger = logging.getLogger(__name__)


@dataclass
class Ranking:
    """Ordered songs that passed the query, and how many were excluded."""

    songs: list[Song] = field(default_factory=list)
    hidden: int = 0


def shuffle_songs(songs: Sequence[Song], rng: Random) -> Ranking:
    """Uniformly shuffled copy of `songs`, nothing excluded."""
    shuffled = list(songs)
    rng.shuffle(shuffled)
    return Ranking(songs=shuffled, hidden=0)


def rank_songs(
    songs: Sequence[Song],
    query: ParsedQuery,
    custom_lists: CustomLists,
    *,
    threshold: StringFilterThreshold | None = None,
) -> Ranking:
    """Score every song and order the survivors best first.

    Ties are broken by (title, artist, song_hash) so the order is deterministic.

    Args:
        songs: The complete catalog
        query: Parsed search query
        custom_lists: Session custom list cache
        threshold: String filter policy override

    Returns:
        Ranking of the songs that were not excluded
    """
    with span("ranking.rank_songs", song_count=len(songs)):
        scored: list[tuple[int, Song]] = []
        hidden = 0
        for song in songs:
            score = match_score(song, query, custom_lists, threshold=threshold)
            if score <= EXCLUDED:
                hidden += 1
                continue
            scored.append((score, song))

        scored.sort(key=lambda item: (-item[0], item[1].sort_key))
        logger.debug("ranked_songs", extra={"shown": len(scored), "hidden": hidden})
        return Ranking(songs=[song for _, song in scored], hidden=hidden)


def categories(songs: Sequence[Song]) -> list[str]:
    """Distinct genres of the catalog, sorted."""
    return sorted({song.genre for song in songs if song.genre is not None})
