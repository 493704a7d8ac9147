"""Session cache of custom song lists, loaded lazily on first reference."""

import logging
from collections.abc import Iterable

from songbook.domain.loading import InProgress, Loaded, Loading, NotLoaded


logger = logging.getLogger(__name__)


class CustomLists:
    """Named sets of song hashes, each NotLoaded, InProgress or Loaded.

    At most one fetch per list is in flight: `request` only asks for a fetch
    when the list is NotLoaded and moves it to InProgress.
    """

    def __init__(self) -> None:
        self._lists: dict[str, Loading] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._lists

    def register(self, names: Iterable[str]) -> None:
        """Make lists known without loading them. Existing entries are kept."""
        for name in names:
            self._lists.setdefault(name, NotLoaded())

    def names(self) -> list[str]:
        return sorted(self._lists)

    def state(self, name: str) -> Loading:
        return self._lists.get(name, NotLoaded())

    def members(self, name: str) -> frozenset[str] | None:
        """Song hashes in a loaded list, or None if the list is not loaded."""
        match self._lists.get(name):
            case Loaded(value=song_hashes):
                return song_hashes
            case _:
                return None

    def request(self, name: str) -> bool:
        """Mark a list as wanted.

        Returns:
            True if the caller must start a fetch for it
        """
        if not isinstance(self.state(name), NotLoaded):
            return False
        self._lists[name] = InProgress()
        logger.debug("custom_list_requested", extra={"list_name": name})
        return True

    def resolve(self, name: str, song_hashes: Iterable[str]) -> None:
        members = frozenset(song_hashes)
        self._lists[name] = Loaded(members)
        logger.info("custom_list_loaded", extra={"list_name": name, "song_count": len(members)})

    def fail(self, name: str) -> None:
        """Forget a failed load so the next reference retries it."""
        self._lists[name] = NotLoaded()

    def invalidate(self, name: str) -> None:
        """Drop cached members after the list changed on the server."""
        if name in self._lists:
            self._lists[name] = NotLoaded()
