"""Domain models and DTOs."""

from songbook.domain.loading import InProgress, Loaded, Loading, NotLoaded
from songbook.domain.query import ParsedQuery
from songbook.domain.song import Song


__all__ = [
    "InProgress",
    "Loaded",
    "Loading",
    "NotLoaded",
    "ParsedQuery",
    "Song",
]
