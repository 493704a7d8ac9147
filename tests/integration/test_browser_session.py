"""Integration tests for the asyncio browsing session."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest
import pytest_asyncio

from songbook import main
from songbook.core.errors import FetchStatusError
from songbook.domain.messages import Scroll, Search, ToggleVideo
from songbook.interface.session import BrowserSession
from songbook.services.browser_state import BrowserModel, BrowserSnapshot, BrowseState


class FakeCatalogClient:
    """In-memory stand-in for CatalogClient that records calls."""

    def __init__(self, songs, lists=None, *, fail_songs: bool = False) -> None:
        self.songs = songs
        self.lists = {name: set(hashes) for name, hashes in (lists or {}).items()}
        self.fail_songs = fail_songs
        self.list_fetches: list[str] = []

    async def fetch_songs(self):
        await asyncio.sleep(0)
        if self.fail_songs:
            raise FetchStatusError(503, "Service Unavailable")
        return list(self.songs)

    async def fetch_custom_list_index(self):
        return sorted(self.lists)

    async def fetch_custom_list(self, name):
        self.list_fetches.append(name)
        await asyncio.sleep(0)
        if name not in self.lists:
            raise FetchStatusError(404, "Not Found")
        return frozenset(self.lists[name])

    async def add_list_entry(self, name, song_hash):
        self.lists.setdefault(name, set()).add(song_hash)
        return True

    async def remove_list_entry(self, name, song_hash):
        if song_hash not in self.lists.get(name, set()):
            return False
        self.lists[name].discard(song_hash)
        return True


async def no_wait(_seconds: float) -> None:
    await asyncio.sleep(0)


@pytest.fixture
def fake_client(catalog) -> FakeCatalogClient:
    return FakeCatalogClient(catalog, {"Fans": {"h-wl", "h-sb"}})


@pytest.fixture
def renders() -> list[BrowserSnapshot]:
    return []


@pytest_asyncio.fixture
async def session(fake_client, model, renders):
    session = BrowserSession(
        client=fake_client,
        model=model,
        scroll_probe=lambda: 10_000,
        on_render=renders.append,
        sleep=no_wait,
    )
    await session.start()
    await session.settle()
    yield session
    await session.stop()


@pytest.mark.integration
class TestBrowserSession:
    """Tests for BrowserSession driving the model with fetches and timers."""

    @pytest.mark.asyncio
    async def test_startup_loads_catalog_and_lists(self, session, catalog, renders):
        snapshot = session.model.snapshot()

        assert snapshot.state == BrowseState.IDLE
        assert snapshot.visible_count == len(catalog)
        assert session.model.custom_lists.names() == ["Fans"]
        # autotyper ran to completion
        assert snapshot.placeholder == session.model.autotyper.target
        assert renders[-1] == snapshot

    @pytest.mark.asyncio
    async def test_list_fetched_once_while_typing(self, session, fake_client):
        for query in ("list:F", "list:Fans", "list:Fans ", "list:Fans a", "list:Fans"):
            session.dispatch(Search(query=query))
        await session.settle()

        assert fake_client.list_fetches.count("Fans") == 1
        assert sorted(song.title for song in session.model.snapshot().songs) == ["Sabotage", "Waterloo"]

    @pytest.mark.asyncio
    async def test_missing_list_shows_nothing_and_retries(self, session, fake_client):
        session.dispatch(Search(query="list:Nope"))
        await session.settle()

        assert session.model.snapshot().visible_count == 0
        session.dispatch(Search(query="list:Nope "))
        await session.settle()
        assert fake_client.list_fetches.count("Nope") == 2

    @pytest.mark.asyncio
    async def test_list_mutation_refreshes_active_list(self, session, fake_client):
        session.dispatch(Search(query="list:Fans"))
        await session.settle()

        assert await session.add_to_list("Fans", "h-dq") is True
        await session.settle()

        assert fake_client.list_fetches.count("Fans") == 2
        assert session.model.snapshot().visible_count == 3

        assert await session.remove_from_list("Fans", "h-is") is False
        assert await session.remove_from_list("Fans", "h-wl") is True
        await session.settle()
        assert session.model.snapshot().visible_count == 2

    @pytest.mark.asyncio
    async def test_toggle_goes_through_search(self, session):
        session.dispatch(ToggleVideo())
        await session.settle()

        snapshot = session.model.snapshot()
        assert snapshot.query == "video:true"
        assert sorted(song.title for song in snapshot.songs) == ["Dancing Queen", "Sabotage"]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_scroll_checks_reveal_until_probe_is_far_from_end(catalog):
    remaining = [0, 0, 10_000]
    client = FakeCatalogClient(catalog)
    session = BrowserSession(
        client=client,
        model=BrowserModel(initial_reveal_count=1),
        scroll_probe=lambda: remaining.pop(0) if remaining else 10_000,
        sleep=no_wait,
    )
    await session.start()
    await session.settle()

    session.dispatch(Search(query="abba"))
    await session.settle()
    assert session.model.snapshot().shown_count == 1

    session.process(Scroll(remaining_px=0))
    await session.settle()

    # one reveal from the message plus two from the rechecks that still saw the end
    assert session.model.snapshot().shown_count == 4
    await session.stop()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_songs_failure_leaves_empty_catalog(catalog):
    scrolled: list[bool] = []
    session = BrowserSession(
        client=FakeCatalogClient(catalog, fail_songs=True),
        model=BrowserModel(initial_reveal_count=3),
        on_scroll_to_top=lambda: scrolled.append(True),
        sleep=no_wait,
    )
    await session.start()
    await session.settle()

    assert session.model.songs == []
    assert session.model.snapshot().visible_count == 0
    assert scrolled == []
    await session.stop()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_start_session_configures_logging(catalog):
    client = FakeCatalogClient(catalog)
    with patch("songbook.main.configure_logfire", MagicMock()) as configure:
        session = await main.start_session(client=client)

    configure.assert_called_once()
    await session.settle()
    assert session.model.snapshot().visible_count == len(catalog)
    await session.stop()
