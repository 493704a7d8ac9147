"""Tests for the catalog HTTP client."""

import json

import httpx
import pytest

from songbook.core.errors import (
    FetchNetworkError,
    FetchStatusError,
    PayloadDecodeError,
    UnknownContentTypeError,
)
from songbook.interface import catalog_client
from songbook.interface.catalog_client import CatalogClient


SONGS_JSON = [
    {
        "title": "Waterloo",
        "artist": "ABBA",
        "song_hash": "h-wl",
        "language": "English",
        "genre": "Pop",
        "year": 1974,
        "bpm": 147,
    },
    {
        "title": "Islands in the Stream",
        "artist": "Dolly Parton",
        "song_hash": "h-is",
        "duetsingerp1": "Dolly",
        "duetsingerp2": "Kenny",
    },
]

SONGS_CSV = (
    "title,artist,song_hash,cover,language,video,year,genre,bpm,duetsingerp1,duetsingerp2\r\n"
    "Waterloo,ABBA,h-wl,,English,,1974,Pop,147,,\r\n"
    "Sabotage,Beastie Boys,h-sb,yes,,sb.mp4,1994,Hip Hop,,,\r\n"
)


def make_client(handler, **kwargs) -> CatalogClient:
    return CatalogClient(
        base_url="http://catalog.test",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def json_response(data, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(data).encode(),
        headers={"content-type": "application/json"},
    )


def csv_response(text: str) -> httpx.Response:
    return httpx.Response(200, text=text, headers={"content-type": "text/csv; charset=utf-8"})


@pytest.mark.unit
class TestFetchSongs:
    """Tests for CatalogClient.fetch_songs."""

    @pytest.mark.asyncio
    async def test_json_catalog(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return json_response(SONGS_JSON)

        async with make_client(handler) as client:
            songs = await client.fetch_songs()

        assert [song.title for song in songs] == ["Waterloo", "Islands in the Stream"]
        assert songs[0].year == "1974"
        assert songs[0].bpm == "147"
        assert songs[1].duet == ("Dolly", "Kenny")
        assert requests[0].url.path == "/api/songs"
        assert "text/csv" in requests[0].headers["accept"]

    @pytest.mark.asyncio
    async def test_csv_catalog_with_charset(self):
        async with make_client(lambda request: csv_response(SONGS_CSV)) as client:
            songs = await client.fetch_songs()

        waterloo, sabotage = songs
        assert waterloo.video is None
        assert waterloo.cover is None
        assert waterloo.genre == "Pop"
        assert sabotage.has_video
        assert sabotage.language is None
        assert not sabotage.is_duet

    @pytest.mark.asyncio
    async def test_unknown_content_type(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html/>", headers={"content-type": "text/html"})

        async with make_client(handler) as client:
            with pytest.raises(UnknownContentTypeError) as exc_info:
                await client.fetch_songs()

        assert exc_info.value.content_type == "text/html"

    @pytest.mark.asyncio
    async def test_missing_content_type(self):
        async with make_client(lambda request: httpx.Response(200, content=b"[]")) as client:
            with pytest.raises(UnknownContentTypeError):
                await client.fetch_songs()

    @pytest.mark.asyncio
    async def test_status_error(self):
        async with make_client(lambda request: httpx.Response(503)) as client:
            with pytest.raises(FetchStatusError) as exc_info:
                await client.fetch_songs()

        assert exc_info.value.code == 503
        assert exc_info.value.text == "Service Unavailable"

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(FetchNetworkError) as exc_info:
                await client.fetch_songs()

        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_malformed_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"[{", headers={"content-type": "application/json"})

        async with make_client(handler) as client:
            with pytest.raises(PayloadDecodeError):
                await client.fetch_songs()

    @pytest.mark.asyncio
    async def test_json_object_instead_of_array(self):
        async with make_client(lambda request: json_response({"songs": []})) as client:
            with pytest.raises(PayloadDecodeError):
                await client.fetch_songs()

    @pytest.mark.asyncio
    async def test_record_missing_required_field(self):
        async with make_client(lambda request: json_response([{"title": "No artist"}])) as client:
            with pytest.raises(PayloadDecodeError):
                await client.fetch_songs()


@pytest.mark.unit
class TestCustomLists:
    """Tests for custom list endpoints."""

    @pytest.mark.asyncio
    async def test_list_index_json(self):
        async with make_client(lambda request: json_response(["Fans", "Party"])) as client:
            assert await client.fetch_custom_list_index() == ["Fans", "Party"]

    @pytest.mark.asyncio
    async def test_list_index_csv(self):
        async with make_client(lambda request: csv_response("name\nFans\nParty\n")) as client:
            assert await client.fetch_custom_list_index() == ["Fans", "Party"]

    @pytest.mark.asyncio
    async def test_list_members(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return json_response(["h-wl", "h-dq", "h-wl"])

        async with make_client(handler) as client:
            members = await client.fetch_custom_list("My Fans")

        assert members == frozenset({"h-wl", "h-dq"})
        assert requests[0].url.raw_path == b"/api/custom/list/My%20Fans"

    @pytest.mark.asyncio
    async def test_non_string_member_rejected(self):
        async with make_client(lambda request: json_response([{"a": 1}, [2]])) as client:
            with pytest.raises(PayloadDecodeError):
                await client.fetch_custom_list("Fans")


@pytest.mark.unit
class TestListMutations:
    """Tests for adding and removing list entries."""

    @pytest.mark.asyncio
    async def test_add_entry_sends_session_cookie(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200)

        async with make_client(handler, session_cookie="secret") as client:
            assert await client.add_list_entry("Fans", "h-wl") is True

        assert requests[0].method == "PUT"
        assert requests[0].url.path == "/api/custom/list/Fans/h-wl"
        assert requests[0].headers["cookie"] == "id=secret"

    @pytest.mark.asyncio
    async def test_add_entry_unauthorised(self):
        async with make_client(lambda request: httpx.Response(401), session_cookie="secret") as client:
            with pytest.raises(FetchStatusError) as exc_info:
                await client.add_list_entry("Fans", "h-wl")

        assert exc_info.value.code == 401

    @pytest.mark.asyncio
    async def test_remove_entry(self):
        methods: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            methods.append(request.method)
            return httpx.Response(204)

        async with make_client(handler, session_cookie="secret") as client:
            assert await client.remove_list_entry("Fans", "h-wl") is True

        assert methods == ["DELETE"]

    @pytest.mark.asyncio
    async def test_remove_missing_entry(self):
        async with make_client(lambda request: httpx.Response(404), session_cookie="secret") as client:
            assert await client.remove_list_entry("Fans", "h-wl") is False

    @pytest.mark.asyncio
    async def test_remove_entry_server_error(self):
        async with make_client(lambda request: httpx.Response(500), session_cookie="secret") as client:
            with pytest.raises(FetchStatusError):
                await client.remove_list_entry("Fans", "h-wl")

    @pytest.mark.asyncio
    async def test_mutations_require_session_cookie(self, monkeypatch: pytest.MonkeyPatch):
        """Test list mutations are refused before any request when no session cookie is configured."""
        monkeypatch.setattr(catalog_client.settings, "catalog_session_cookie", None)
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200)

        async with make_client(handler) as client:
            with pytest.raises(ValueError, match="CATALOG_SESSION_COOKIE"):
                await client.add_list_entry("Fans", "h-wl")
            with pytest.raises(ValueError, match="Catalog session credential not configured"):
                await client.remove_list_entry("Fans", "h-wl")

        assert requests == []

    @pytest.mark.asyncio
    async def test_configured_session_cookie_is_used(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(catalog_client.settings, "catalog_session_cookie", "from-env")
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200)

        async with make_client(handler) as client:
            assert await client.add_list_entry("Fans", "h-wl") is True

        assert requests[0].headers["cookie"] == "id=from-env"
