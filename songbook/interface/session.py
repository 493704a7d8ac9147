"""Asyncio runtime for a browsing session.

Messages are processed strictly one at a time by a single consumer task. Each
command returned by the model becomes a fire-and-forget task (fetch or timer)
whose result is queued as another message; nothing is cancelled when it goes
stale, the model decides whether a late result still matters.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from songbook.core.errors import FetchError, classify_fetch_error
from songbook.core.logging import log_with_context
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
    SongsFailed,
    SongsLoaded,
)
from songbook.interface.catalog_client import CatalogClient
from songbook.services.browser_state import BrowserModel, BrowserSnapshot


logger = logging.getLogger(__name__)


class BrowserSession:
    """Drives a BrowserModel with real fetches and timers."""

    def __init__(
        self,
        *,
        client: CatalogClient,
        model: BrowserModel | None = None,
        scroll_probe: Callable[[], int] | None = None,
        on_render: Callable[[BrowserSnapshot], None] | None = None,
        on_scroll_to_top: Callable[[], None] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the session.

        Args:
            client: Catalog client used for all fetches
            model: Browser state, a fresh one by default
            scroll_probe: Returns how many pixels of the song list remain below the viewport
            on_render: Called with a snapshot after every processed message
            on_scroll_to_top: Called whenever the song list should jump back to the top
            sleep: Coroutine used for timers
        """
        self.client = client
        self.model = model or BrowserModel()
        self._scroll_probe = scroll_probe
        self._on_render = on_render
        self._on_scroll_to_top = on_scroll_to_top
        self._sleep = sleep

        self._queue: asyncio.Queue[Msg] = asyncio.Queue()
        self._tasks: set[asyncio.Task[None]] = set()
        self._runner: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Issue the start-up fetches and begin processing messages."""
        self._perform_all(self.model.init())
        self._runner = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop processing and cancel outstanding fetches and timers."""
        tasks = [*self._tasks, *([self._runner] if self._runner else [])]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._runner = None

    def dispatch(self, msg: Msg) -> None:
        """Queue a message for processing."""
        self._queue.put_nowait(msg)

    def process(self, msg: Msg) -> BrowserSnapshot:
        """Apply one message, start its commands and render the result."""
        commands = self.model.update(msg)
        self._perform_all(commands)
        snapshot = self.model.snapshot()
        if self._on_render is not None:
            self._on_render(snapshot)
        return snapshot

    async def settle(self) -> None:
        """Wait until no messages are queued and no fetch or timer is pending."""
        while True:
            await self._queue.join()
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                if self._queue.empty():
                    return
                continue
            await asyncio.wait(pending)

    async def add_to_list(self, name: str, song_hash: str) -> bool:
        """Add a song to a custom list on the server and refresh the cached copy."""
        added = await self.client.add_list_entry(name, song_hash)
        if added:
            self.dispatch(CustomListChanged(name=name))
        return added

    async def remove_from_list(self, name: str, song_hash: str) -> bool:
        """Remove a song from a custom list on the server and refresh the cached copy."""
        removed = await self.client.remove_list_entry(name, song_hash)
        if removed:
            self.dispatch(CustomListChanged(name=name))
        return removed

    async def _run(self) -> None:
        while True:
            msg = await self._queue.get()
            try:
                self.process(msg)
            except Exception:
                logger.exception("message_processing_failed", extra={"message_type": type(msg).__name__})
            finally:
                self._queue.task_done()

    def _perform_all(self, commands: list[Command]) -> None:
        for command in commands:
            self._perform(command)

    def _perform(self, command: Command) -> None:
        match command:
            case FetchSongs():
                self._spawn(self._fetch_songs())
            case FetchCustomListIndex():
                self._spawn(self._fetch_custom_list_index())
            case FetchCustomList(name=name):
                self._spawn(self._fetch_custom_list(name))
            case ScheduleAutotype(delay_ms=delay_ms, generation=generation):
                self._spawn(self._after(delay_ms, lambda: AutotypeTick(generation=generation)))
            case ScheduleScrollCheck(delay_ms=delay_ms):
                if self._scroll_probe is not None:
                    probe = self._scroll_probe
                    self._spawn(self._after(delay_ms, lambda: Scroll(remaining_px=probe())))
            case ScrollToTop():
                if self._on_scroll_to_top is not None:
                    self._on_scroll_to_top()

    def _spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _after(self, delay_ms: int, make_msg: Callable[[], Msg]) -> None:
        await self._sleep(delay_ms / 1000)
        self.dispatch(make_msg())

    async def _fetch_songs(self) -> None:
        try:
            songs = await self.client.fetch_songs()
        except FetchError as e:
            self._log_fetch_failure("songs_fetch_failed", e)
            self.dispatch(SongsFailed(error=str(e)))
            return
        self.dispatch(SongsLoaded(songs=tuple(songs)))

    async def _fetch_custom_list_index(self) -> None:
        try:
            names = await self.client.fetch_custom_list_index()
        except FetchError as e:
            self._log_fetch_failure("custom_list_index_fetch_failed", e)
            return
        self.dispatch(CustomListIndexLoaded(names=tuple(names)))

    async def _fetch_custom_list(self, name: str) -> None:
        try:
            song_hashes = await self.client.fetch_custom_list(name)
        except FetchError as e:
            self._log_fetch_failure("custom_list_fetch_failed", e, list_name=name)
            self.dispatch(CustomListFailed(name=name, error=str(e)))
            return
        self.dispatch(CustomListLoaded(name=name, song_hashes=frozenset(song_hashes)))

    @staticmethod
    def _log_fetch_failure(event: str, error: FetchError, **context: object) -> None:
        log_with_context(
            logger,
            "error",
            event,
            category=classify_fetch_error(error).value,
            error=str(error),
            **context,
        )
