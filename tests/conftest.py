"""Pytest configuration and shared fixtures."""

from random import Random

import pytest

from songbook.domain.song import Song
from songbook.services.browser_state import BrowserModel
from tests.factories import make_song


@pytest.fixture
def catalog() -> list[Song]:
    """Small mixed catalog covering every optional field."""
    return [
        make_song(
            "Dancing Queen",
            "ABBA",
            "h-dq",
            language="English",
            genre="Pop",
            year="1976",
            video="dq.mp4",
        ),
        make_song("Waterloo", "ABBA", "h-wl", language="English", genre="Pop", year="1974"),
        make_song(
            "Islands in the Stream",
            "Dolly Parton",
            "h-is",
            genre="Country",
            year="1983",
            duet_singer_1="Dolly",
            duet_singer_2="Kenny",
        ),
        make_song("Du gamla du fria", "Traditional", "h-dg", language="Swedish", genre="Folk Music"),
        make_song("Sabotage", "Beastie Boys", "h-sb", genre="Hip Hop", year="1994", video="sb.mp4"),
    ]


@pytest.fixture
def rng() -> Random:
    """Seeded random source for reproducible shuffles."""
    return Random(1234)


@pytest.fixture
def model(rng: Random) -> BrowserModel:
    """Fresh browser model with a small reveal window."""
    return BrowserModel(rng=rng, initial_reveal_count=3)
