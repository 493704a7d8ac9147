"""Song browser state machine.

`BrowserModel.update` handles one message at a time and returns the commands the
runtime has to perform. All ranking work happens synchronously inside `update`,
so the view is always consistent with the query that produced it.

States:
    IDLE: the search field is empty. The catalog is shown in a fresh random
        order and the placeholder autotyper gets a new example query.
    FILTERED: the search field has text. Songs are scored, excluded songs are
        counted and hidden, and the rest are ordered best first.
"""

import logging
import re
from enum import StrEnum
from random import Random

from pydantic import BaseModel, ConfigDict, Field

from songbook.core.config import StringFilterThreshold, constants, settings
from songbook.domain.messages import (
    AutotypeTick,
    Command,
    CustomListChanged,
    CustomListFailed,
    CustomListIndexLoaded,
    CustomListLoaded,
    FetchCustomList,
    FetchCustomListIndex,
    FetchSongs,
    Msg,
    ScheduleAutotype,
    ScheduleScrollCheck,
    Scroll,
    ScrollToTop,
    Search,
    SelectCategory,
    Shuffle,
    SongsFailed,
    SongsLoaded,
    ToggleCategories,
    ToggleDuets,
    ToggleVideo,
)
from songbook.domain.query import ParsedQuery
from songbook.domain.song import Song
from songbook.services import ranking_service
from songbook.services.autotyper import Autotyper
from songbook.services.custom_list_service import CustomLists
from songbook.services.ranking_service import Ranking


logger = logging.getLogger(__name__)

_ASCII_WHITESPACE = " \t\n\r\f\v"
_WHITESPACE = re.compile(r"\s+")


class BrowseState(StrEnum):
    """Whether a search is active."""

    IDLE = "idle"
    FILTERED = "filtered"


class Screen(StrEnum):
    """Which list is on screen."""

    SONGS = "songs"
    CATEGORIES = "categories"


class BrowserSnapshot(BaseModel):
    """Read-only view of the browser after a processed message."""

    model_config = ConfigDict(frozen=True)

    state: BrowseState = Field(..., description="Idle or filtered")
    screen: Screen = Field(..., description="Song list or category list")
    query: str = Field(..., description="Current search string")
    songs: list[Song] = Field(..., description="Revealed prefix of the ranked songs")
    visible_count: int = Field(..., description="Number of songs that passed the query")
    hidden_count: int = Field(..., description="Number of songs excluded by the query")
    shown_count: int = Field(..., description="Size of the revealed prefix window")
    placeholder: str = Field(..., description="Placeholder text typed so far")
    filter_video: bool = Field(..., description="Whether the query requires a video")
    filter_duets: bool = Field(..., description="Whether the query requires a duet")
    categories: list[str] = Field(default_factory=list, description="Distinct genres in the catalog")


class BrowserModel:
    """State of one browsing session."""

    def __init__(
        self,
        *,
        rng: Random | None = None,
        initial_reveal_count: int | None = None,
        threshold: StringFilterThreshold | None = None,
    ) -> None:
        self.rng = rng or Random()
        self.initial_reveal_count = initial_reveal_count or settings.initial_reveal_count
        self.threshold = threshold

        self.songs: list[Song] = []
        self.custom_lists = CustomLists()
        self.query = ""
        self.state = BrowseState.IDLE
        self.screen = Screen.SONGS
        self.ranking = Ranking()
        self.shown = self.initial_reveal_count
        self.autotyper = Autotyper()

    @property
    def parsed_query(self) -> ParsedQuery:
        return ParsedQuery.parse(self.query)

    def init(self) -> list[Command]:
        """Commands to issue when the session starts."""
        return [
            FetchSongs(),
            FetchCustomListIndex(),
            ScheduleAutotype(delay_ms=constants.AUTOTYPE_INITIAL_DELAY_MS, generation=self.autotyper.generation),
        ]

    def update(self, msg: Msg) -> list[Command]:  # noqa: C901, PLR0911
        """Apply a message and return the commands it produces."""
        match msg:
            case SongsLoaded(songs=songs):
                self.songs = list(songs)
                logger.info("songs_loaded", extra={"song_count": len(self.songs)})
                return self._update_song_list()

            case SongsFailed(error=error):
                logger.warning("songs_unavailable", extra={"error": error})
                return []

            case CustomListIndexLoaded(names=names):
                self.custom_lists.register(names)
                return []

            case CustomListLoaded(name=name, song_hashes=song_hashes):
                still_wanted = self.parsed_query.list == name
                self.custom_lists.resolve(name, song_hashes)
                if still_wanted:
                    return self._update_song_list()
                return []

            case CustomListFailed(name=name, error=error):
                logger.warning("custom_list_fetch_failed", extra={"list_name": name, "error": error})
                self.custom_lists.fail(name)
                return []

            case CustomListChanged(name=name):
                self.custom_lists.invalidate(name)
                if self.parsed_query.list == name and self.custom_lists.request(name):
                    return [FetchCustomList(name=name)]
                return []

            case Search(query=query):
                self.query = query
                return self._update_song_list()

            case ToggleVideo():
                query = self.parsed_query
                query.video = None if query.video is True else True
                return self.update(Search(query=query.format()))

            case ToggleDuets():
                query = self.parsed_query
                query.duet = None if query.duet is True else True
                return self.update(Search(query=query.format()))

            case ToggleCategories():
                self.screen = Screen.SONGS if self.screen == Screen.CATEGORIES else Screen.CATEGORIES
                return []

            case SelectCategory(genre=genre):
                self.screen = Screen.SONGS
                compact = _WHITESPACE.sub("", genre)
                return self.update(Search(query=f"genre:{compact}"))

            case Shuffle():
                return self._shuffle()

            case Scroll(remaining_px=remaining_px):
                return self._reveal_more(remaining_px)

            case AutotypeTick(generation=generation):
                if self.autotyper.tick(generation):
                    return [ScheduleAutotype(delay_ms=constants.AUTOTYPE_TICK_MS, generation=generation)]
                return []

        logger.warning("unhandled_message", extra={"message_type": type(msg).__name__})
        return []

    def snapshot(self) -> BrowserSnapshot:
        query = self.parsed_query
        return BrowserSnapshot(
            state=self.state,
            screen=self.screen,
            query=self.query,
            songs=self.ranking.songs[: self.shown],
            visible_count=len(self.ranking.songs),
            hidden_count=self.ranking.hidden,
            shown_count=self.shown,
            placeholder=self.autotyper.display,
            filter_video=query.video is True,
            filter_duets=query.duet is True,
            categories=ranking_service.categories(self.songs),
        )

    def _update_song_list(self) -> list[Command]:
        """Recompute the ranking from the full catalog for the current query."""
        commands: list[Command] = [ScrollToTop()]
        self.shown = self.initial_reveal_count

        previous = self.state
        self.state = BrowseState.FILTERED if self.query.strip(_ASCII_WHITESPACE) else BrowseState.IDLE
        if previous != self.state:
            logger.debug("browse_state_changed", extra={"from": previous.value, "to": self.state.value})

        if self.state == BrowseState.IDLE:
            self.ranking = ranking_service.shuffle_songs(self.songs, self.rng)
            commands.extend(self._autotype_top_song())
            return commands

        query = self.parsed_query
        if query.list is not None and self.custom_lists.request(query.list):
            commands.append(FetchCustomList(name=query.list))

        self.ranking = ranking_service.rank_songs(self.songs, query, self.custom_lists, threshold=self.threshold)
        return commands

    def _shuffle(self) -> list[Command]:
        """Drop free-text terms, keep structural filters, and shuffle what remains."""
        self.query = self.parsed_query.clear_fuzzy_parameters().format()
        commands = self._update_song_list()
        if self.state == BrowseState.FILTERED:
            self.rng.shuffle(self.ranking.songs)
            commands.extend(self._autotype_top_song())
        return commands

    def _reveal_more(self, remaining_px: int) -> list[Command]:
        """Reveal one more song while the list is scrolled near its end."""
        near_end = remaining_px < constants.ROW_HEIGHT_PX * constants.SCROLL_THRESHOLD_ROWS
        if not near_end or self.shown >= len(self.ranking.songs):
            return []
        self.shown += 1
        return [ScheduleScrollCheck(delay_ms=constants.SCROLL_RECHECK_MS)]

    def _autotype_top_song(self) -> list[Command]:
        if not self.ranking.songs:
            return []
        example = ParsedQuery.random(self.ranking.songs[0], self.rng).format()
        generation = self.autotyper.restart(example)
        return [ScheduleAutotype(delay_ms=constants.AUTOTYPE_RESTART_DELAY_MS, generation=generation)]
