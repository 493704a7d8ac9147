"""HTTP client for the song catalog server.

List endpoints are content negotiated: the server answers either CSV (with a
header row) or JSON arrays, and both are accepted.
"""

import csv
import io
import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from songbook.core.config import constants, settings
from songbook.core.errors import (
    FetchNetworkError,
    FetchStatusError,
    PayloadDecodeError,
    UnknownContentTypeError,
)
from songbook.core.logging import span
from songbook.domain.song import Song


logger = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404


def _content_type(response: httpx.Response) -> str | None:
    raw = response.headers.get("content-type")
    if raw is None:
        return None
    return raw.split(";", 1)[0].strip().lower()


def _parse_csv(text: str) -> list[dict[str, str]]:
    try:
        return list(csv.DictReader(io.StringIO(text)))
    except csv.Error as e:
        raise PayloadDecodeError(f"error deserializing csv: {e}") from e


def _scalar(row: Any) -> str:
    """Single value of a row; CSV rows of a scalar list carry one column."""
    if isinstance(row, dict):
        values = list(row.values())
        if not values:
            raise PayloadDecodeError("empty csv row")
        return str(values[0])
    if isinstance(row, str | int):
        return str(row)
    raise PayloadDecodeError(f"expected a string, got {type(row).__name__}")


class CatalogClient:
    """Async client for songs and custom lists."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        session_cookie: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ) -> None:
        cookie = session_cookie or settings.catalog_session_cookie
        self._session_cookie = cookie
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.catalog_base_url,
            headers={"Accept": constants.HTTP_ACCEPT},
            cookies={constants.SESSION_COOKIE_NAME: cookie} if cookie else None,
            timeout=timeout or constants.API_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str) -> httpx.Response:
        try:
            response = await self._client.request(method, path)
        except httpx.HTTPError as e:
            raise FetchNetworkError(path, e) from e

        if not response.is_success:
            raise FetchStatusError(response.status_code, response.reason_phrase)
        return response

    async def _fetch_list_of(self, path: str) -> list[Any]:
        """GET a list resource and decode it according to its content type."""
        with span("catalog.fetch", path=path):
            response = await self._request("GET", path)
            content_type = _content_type(response)

            if content_type == "text/csv":
                return _parse_csv(response.text)

            if content_type == "application/json":
                try:
                    data = response.json()
                except ValueError as e:
                    raise PayloadDecodeError(f"error deserializing json: {e}") from e
                if not isinstance(data, list):
                    raise PayloadDecodeError(f"expected a json array, got {type(data).__name__}")
                return data

            raise UnknownContentTypeError(response.headers.get("content-type"))

    async def fetch_songs(self) -> list[Song]:
        """Fetch the full catalog."""
        rows = await self._fetch_list_of(constants.SONGS_PATH)
        try:
            songs = [Song.model_validate(row) for row in rows]
        except ValidationError as e:
            raise PayloadDecodeError(f"invalid song record: {e}") from e

        logger.info("catalog_fetched", extra={"song_count": len(songs)})
        return songs

    async def fetch_custom_list_index(self) -> list[str]:
        """Fetch the names of all custom lists."""
        rows = await self._fetch_list_of(constants.CUSTOM_LISTS_PATH)
        return [_scalar(row) for row in rows]

    async def fetch_custom_list(self, name: str) -> frozenset[str]:
        """Fetch the song hashes in one custom list."""
        rows = await self._fetch_list_of(constants.CUSTOM_LIST_PATH.format(name=quote(name, safe="")))
        return frozenset(_scalar(row) for row in rows)

    def _list_entry_path(self, name: str, song_hash: str) -> str:
        """Path of one list entry, once the session credential is known to be set.

        Raises:
            ValueError: If no session cookie is configured
        """
        if not self._session_cookie:
            settings.require_credential("catalog_session_cookie", "Catalog session")
        return constants.CUSTOM_LIST_ENTRY_PATH.format(name=quote(name, safe=""), song_hash=quote(song_hash, safe=""))

    async def add_list_entry(self, name: str, song_hash: str) -> bool:
        """Add a song to a custom list. Requires an authorised session.

        Returns:
            True once the server has stored the entry

        Raises:
            ValueError: If no session cookie is configured
        """
        path = self._list_entry_path(name, song_hash)
        with span("catalog.add_list_entry", list_name=name):
            await self._request("PUT", path)
        logger.info("custom_list_entry_added", extra={"list_name": name, "song_hash": song_hash})
        return True

    async def remove_list_entry(self, name: str, song_hash: str) -> bool:
        """Remove a song from a custom list. Requires an authorised session.

        Returns:
            True if an entry was removed, False if the list did not contain it
        """
        path = self._list_entry_path(name, song_hash)
        with span("catalog.remove_list_entry", list_name=name):
            try:
                await self._request("DELETE", path)
            except FetchStatusError as e:
                if e.code == HTTP_NOT_FOUND:
                    return False
                raise
        logger.info("custom_list_entry_removed", extra={"list_name": name, "song_hash": song_hash})
        return True
