# ABOUTME: Edition preference helpers: spotting French-language editions and publishers.
# ABOUTME: Providers use these to pick a French edition out of a candidate list.

from collections.abc import Callable, Sequence
from typing import TypeVar

T = TypeVar("T")

# Lowercase substrings of publisher names that mark a French edition.
FRENCH_PUBLISHERS: tuple[str, ...] = (
    "gallimard",
    "hachette",
    "flammarion",
    "actes sud",
    "seuil",
    "albin michel",
    "grasset",
    "pocket",
    "j'ai lu",
    "folio",
    "plon",
    "robert laffont",
    "éditions",
    "larousse",
    "nathan",
    "denoël",
    "fayard",
    "minuit",
    "belfond",
    "stock",
    "puf",
)


def is_french_publisher(publisher: str | None) -> bool:
    """Whether a publisher name contains one of the known French publishers."""
    if not publisher:
        return False
    lowered = publisher.lower()
    return any(name in lowered for name in FRENCH_PUBLISHERS)


def prefer(candidates: Sequence[T], predicate: Callable[[T], bool]) -> T | None:
    """Return the first candidate satisfying predicate, else the first candidate."""
    for candidate in candidates:
        if predicate(candidate):
            return candidate
    return candidates[0] if candidates else None
