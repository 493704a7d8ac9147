"""Search query mini-language.

A query is whitespace separated. Tokens of the form `key:value` with a known key
set a typed field; every other token without a colon is free text:

    hello world artist:abba duet:yes lang:english genre:pop year:1979 list:Fans

Parsing is total: unknown keys are dropped and boolean fields with an
unrecognised value are left unset.
"""

import re
from dataclasses import dataclass, fields, replace
from random import Random
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from songbook.domain.song import Song


_WHITESPACE = re.compile(r"[ \t\n\r\f\v]+")

_TRUE_VALUES = frozenset({"true", "yes", "y"})
_FALSE_VALUES = frozenset({"false", "no", "n"})

# Query key for each field, in canonical output order.
_KEYS: dict[str, str] = {
    "title": "title",
    "artist": "artist",
    "duet": "duet",
    "video": "video",
    "language": "lang",
    "genre": "genre",
    "year": "year",
    "list": "list",
}
_FIELDS_BY_KEY = {key: name for name, key in _KEYS.items()}
_BOOL_FIELDS = frozenset({"duet", "video"})


def _tokens(raw: str) -> list[str]:
    return [token for token in _WHITESPACE.split(raw) if token]


def parse_bool(value: str) -> bool | None:
    """Parse a boolean query value; anything unrecognised means no constraint."""
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return None


@dataclass
class ParsedQuery:
    """Structured form of a search string."""

    plain: str | None = None
    title: str | None = None
    artist: str | None = None
    duet: bool | None = None
    video: bool | None = None
    language: str | None = None
    genre: str | None = None
    year: str | None = None
    list: str | None = None

    @classmethod
    def parse(cls, raw: str) -> "ParsedQuery":
        """Parse a raw search string. Never fails."""
        parsed = cls()
        plain_words: list[str] = []

        for token in _tokens(raw):
            key, sep, value = token.partition(":")
            if not sep:
                plain_words.append(token)
                continue

            name = _FIELDS_BY_KEY.get(key)
            if name is None:
                continue
            if name in _BOOL_FIELDS:
                setattr(parsed, name, parse_bool(value))
            else:
                setattr(parsed, name, value)

        if plain_words:
            parsed.plain = " ".join(plain_words)
        return parsed

    def format(self) -> str:
        """Canonical string form; re-parsing it yields an equal query."""
        parts: list[str] = []
        if self.plain is not None:
            parts.append(self.plain)

        for name, key in _KEYS.items():
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool):
                value = "true" if value else "false"
            parts.append(f"{key}:{value}")

        return " ".join(parts)

    def __str__(self) -> str:
        return self.format()

    def is_empty(self) -> bool:
        return all(getattr(self, field.name) is None for field in fields(self))

    def has_fuzzy_parameters(self) -> bool:
        """Whether any free-text field that influences ranking order is set."""
        return any(value is not None for value in (self.plain, self.title, self.artist))

    def clear_fuzzy_parameters(self) -> "ParsedQuery":
        """Copy of this query with only the structural filters kept."""
        return replace(self, plain=None, title=None, artist=None)

    @classmethod
    def random(cls, song: "Song", rng: Random) -> "ParsedQuery":
        """Generate a plausible example query that matches `song`.

        One primary field is picked among the plain title, the plain artist, and
        whitespace-free `title:`/`artist:` filters. Half of the time one of the
        song's present language/genre/year values is added, cut at its first word.

        Args:
            song: Song the query should describe
            rng: Random source; a seeded instance gives a reproducible query

        Returns:
            The generated query
        """
        primary = rng.randrange(4)
        if primary == 0:
            query = cls(plain=song.title)
        elif primary == 1:
            query = cls(plain=song.artist)
        elif primary == 2:
            query = cls(title=_join_spaces(song.title))
        else:
            query = cls(artist=_join_spaces(song.artist))

        extras = [
            (name, value)
            for name, value in (("language", song.language), ("genre", song.genre), ("year", song.year))
            if value is not None and _first_word(value)
        ]
        if extras and rng.randrange(2):
            name, value = rng.choice(extras)
            setattr(query, name, _first_word(value))

        return query


def _join_spaces(value: str) -> str:
    return "".join(_tokens(value))


def _first_word(value: str) -> str:
    words = _tokens(value)
    return words[0] if words else ""
