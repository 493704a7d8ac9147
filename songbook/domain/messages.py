"""Messages handled by the browser state machine and the commands it emits.

Messages are inputs: user events, timer ticks, and fetch results. Commands are
side effects the runtime performs on the model's behalf; each one eventually
resolves into another message.
"""

from dataclasses import dataclass

from songbook.domain.song import Song


# Messages


@dataclass(frozen=True)
class SongsLoaded:
    """The catalog was fetched."""

    songs: tuple[Song, ...]


@dataclass(frozen=True)
class SongsFailed:
    """The catalog fetch failed."""

    error: str


@dataclass(frozen=True)
class CustomListIndexLoaded:
    """Names of every custom list known to the server."""

    names: tuple[str, ...]


@dataclass(frozen=True)
class CustomListLoaded:
    """Members of one custom list."""

    name: str
    song_hashes: frozenset[str]


@dataclass(frozen=True)
class CustomListFailed:
    """Fetching a custom list failed."""

    name: str
    error: str


@dataclass(frozen=True)
class CustomListChanged:
    """A custom list was modified on the server and must be refetched."""

    name: str


@dataclass(frozen=True)
class Search:
    """The user entered something into the search field."""

    query: str


@dataclass(frozen=True)
class ToggleVideo:
    """The user pressed the video filter button."""


@dataclass(frozen=True)
class ToggleDuets:
    """The user pressed the duet filter button."""


@dataclass(frozen=True)
class ToggleCategories:
    """The user switched between the song list and the category list."""


@dataclass(frozen=True)
class SelectCategory:
    """The user picked a genre from the category list."""

    genre: str


@dataclass(frozen=True)
class Shuffle:
    """The user pressed the shuffle button."""


@dataclass(frozen=True)
class Scroll:
    """The song list scrolled; `remaining_px` is the distance left to the bottom."""

    remaining_px: int


@dataclass(frozen=True)
class AutotypeTick:
    """Reveal one more placeholder character, if `generation` is still current."""

    generation: int


Msg = (
    SongsLoaded
    | SongsFailed
    | CustomListIndexLoaded
    | CustomListLoaded
    | CustomListFailed
    | CustomListChanged
    | Search
    | ToggleVideo
    | ToggleDuets
    | ToggleCategories
    | SelectCategory
    | Shuffle
    | Scroll
    | AutotypeTick
)


# Commands


@dataclass(frozen=True)
class FetchSongs:
    pass


@dataclass(frozen=True)
class FetchCustomListIndex:
    pass


@dataclass(frozen=True)
class FetchCustomList:
    name: str


@dataclass(frozen=True)
class ScheduleAutotype:
    delay_ms: int
    generation: int


@dataclass(frozen=True)
class ScheduleScrollCheck:
    delay_ms: int


@dataclass(frozen=True)
class ScrollToTop:
    pass


Command = FetchSongs | FetchCustomListIndex | FetchCustomList | ScheduleAutotype | ScheduleScrollCheck | ScrollToTop
