"""Load state of a lazily fetched resource."""

from dataclasses import dataclass
from typing import Generic, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class NotLoaded:
    """The resource has not started loading."""


@dataclass(frozen=True)
class InProgress:
    """The resource is currently loading."""


@dataclass(frozen=True)
class Loaded(Generic[T]):
    """The resource has loaded."""

    value: T


Loading = NotLoaded | InProgress | Loaded
