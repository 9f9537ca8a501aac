# Page loader: fetch, normalise created_at, order, and attach display strings.
import logging
from typing import List, Tuple
from .ranking import SortMode, sort_records
from .schemas import GroupRecord, NormalizedRecord
from .settings import settings
from .sources import RecordSource
from .timeutil import format_relative, is_valid_instant, normalize

log = logging.getLogger(__name__)

def effective_query(q: str | None) -> str:
    """Trimmed query, or "" when it is too short to filter on."""
    trimmed = (q or "").strip()
    return trimmed if len(trimmed) >= settings.MIN_QUERY_LENGTH else ""

def normalize_records(rows: List[GroupRecord]) -> List[NormalizedRecord]:
    return [NormalizedRecord(**r.model_dump(), instant=normalize(r.created_at)) for r in rows]

def newest_first(rows: List[NormalizedRecord]) -> List[NormalizedRecord]:
    # created_at is text upstream, so the fetch order is not reliably chronological
    return sort_records(rows, SortMode.LATEST)

def search_groups(source: RecordSource, q: str | None = None, sort: str | None = None) -> Tuple[List[NormalizedRecord], str, SortMode]:
    # Short queries still rank, they just don't filter the fetch
    query = (q or "").strip()
    mode = SortMode.parse(sort)
    rows = newest_first(normalize_records(source.fetch(effective_query(query) or None)))
    log.info("Search q=%r sort=%s -> %s row(s)", query, mode.value, len(rows))
    return sort_records(rows, mode, query), query, mode

def to_item(r: NormalizedRecord, now: int | None = None) -> dict:
    return {
        "id": r.id,
        "title": r.title,
        "description": r.description,
        "writer": r.writer,
        "created_at": r.created_at,
        "instant": int(r.instant) if is_valid_instant(r.instant) else None,
        "display_time": format_relative(r.instant, now=now),
    }
