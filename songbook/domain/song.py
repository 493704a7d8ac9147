"""Song domain model."""

import hashlib
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from songbook.core.config import constants


class Song(BaseModel):
    """Song data transfer object, as served by the catalog."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(..., description="Song title")
    artist: str = Field(..., description="Performing artist")
    song_hash: str = Field(..., description="Stable unique song ID, used by custom lists")
    cover: str | None = Field(default=None, description="Cover art reference, if the song has one")
    language: str | None = Field(default=None, description="Song language")
    video: str | None = Field(default=None, description="Music video reference, if any")
    year: str | None = Field(default=None, description="Release year")
    genre: str | None = Field(default=None, description="Genre")
    bpm: str = Field(default="", description="Beats per minute")
    duet_singer_1: str | None = Field(default=None, alias="duetsingerp1", description="First duet part")
    duet_singer_2: str | None = Field(default=None, alias="duetsingerp2", description="Second duet part")

    @field_validator("title", "artist", "song_hash", "bpm", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, int | float):
            return str(value)
        return value

    @field_validator(
        "cover", "language", "video", "year", "genre", "duet_singer_1", "duet_singer_2", mode="before"
    )
    @classmethod
    def _blank_as_missing(cls, value: Any) -> Any:
        # CSV rows carry empty cells for missing values
        if value == "":
            return None
        if isinstance(value, int | float):
            return str(value)
        return value

    @property
    def id(self) -> str:
        return self.song_hash

    @property
    def duet(self) -> tuple[str, str] | None:
        """Both duet parts, or None unless the song has two singers."""
        if self.duet_singer_1 is None or self.duet_singer_2 is None:
            return None
        return self.duet_singer_1, self.duet_singer_2

    @property
    def is_duet(self) -> bool:
        return self.duet is not None

    @property
    def has_video(self) -> bool:
        return self.video is not None

    @property
    def sort_key(self) -> tuple[str, str, str]:
        """Natural order used to break ranking ties."""
        return self.title, self.artist, self.song_hash


def default_cover(song: Song, covers: list[str]) -> str | None:
    """Pick a stable pseudo-random default cover for a song without cover art.

    Args:
        song: Song needing a cover
        covers: Available default cover URLs

    Returns:
        One of `covers`, always the same one for a given song, or None if there are none
    """
    if not covers:
        return None
    digest = hashlib.blake2b(song.song_hash.encode("utf-8"), digest_size=8).digest()
    return covers[int.from_bytes(digest, "big") % len(covers)]


def cover_url(song: Song, covers: list[str]) -> str | None:
    """Image URL for a song, falling back to a default cover."""
    if song.cover is not None:
        return constants.SONG_COVER_PATH.format(song_hash=song.song_hash)
    return default_cover(song, covers)
