"""Relevance scoring and result ordering."""

from enum import Enum
from typing import Iterable, List, TypeVar

from .schemas import GroupRecord

# (field, weight, frequency bonus)
FIELD_WEIGHTS = (
    ("title", 3, 10),
    ("description", 2, 5),
    ("writer", 1, 5),
)
MAX_POSITION_PENALTY = 99

R = TypeVar("R", bound=GroupRecord)


class SortMode(str, Enum):
    LATEST = "latest"
    RELEVANCE = "relevance"

    @classmethod
    def parse(cls, value: str | None) -> "SortMode":
        """Lenient parse for request input; anything unknown means latest."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.LATEST


def _position_score(haystack: str, needle: str) -> int:
    idx = haystack.find(needle)
    if idx < 0:
        return 0
    return 100 - min(idx, MAX_POSITION_PENALTY)


def relevance_score(record: GroupRecord, query: str | None) -> int:
    """Score ``record`` against ``query``; higher is more relevant.

    Each field contributes ``position + bonus * occurrences`` scaled by its
    weight. Matching is case-insensitive and literal, and occurrences are
    counted without overlap ("aa" occurs once in "aaa").
    """
    needle = (query or "").lower()
    if not needle:
        return 0

    total = 0
    for field, weight, bonus in FIELD_WEIGHTS:
        haystack = str(getattr(record, field, None) or "").lower()
        total += weight * (_position_score(haystack, needle) + bonus * haystack.count(needle))
    return total


def sort_records(records: Iterable[R], mode: SortMode | str, query: str | None = None) -> List[R]:
    """Return a new list ordered for display. Ties keep their input order."""
    mode = SortMode(mode)
    if mode is SortMode.LATEST:
        return sorted(records, key=lambda r: r.instant, reverse=True)
    return sorted(records, key=lambda r: relevance_score(r, query), reverse=True)
