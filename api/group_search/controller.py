"""Interactive search session: the state behind one search page.

Typing schedules a fetch after a quiet period; a newer keystroke replaces
the scheduled one. Fetches that are already running are left alone, and a
sequence number makes sure only the most recently issued fetch updates the
state.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Set

from .ranking import SortMode, sort_records
from .recent import RecentTermsStore
from .schemas import NormalizedRecord
from .search import effective_query, newest_first, normalize_records
from .settings import settings
from .sources import RecordSource, RecordSourceError
from .timeutil import format_relative, is_valid_instant

log = logging.getLogger(__name__)


class Debouncer:
    def __init__(self, delay: Optional[float] = None):
        self.delay = settings.SEARCH_DEBOUNCE_SECONDS if delay is None else delay
        self._pending: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def trigger(self, fn: Callable[[], Awaitable[None]]) -> asyncio.Task:
        """Run ``fn`` once no other trigger has arrived for ``delay`` seconds."""
        self.cancel()
        task = asyncio.get_running_loop().create_task(self._run(fn))
        self._pending = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, fn):
        await asyncio.sleep(self.delay)
        # past the quiet period: later triggers supersede, they don't cancel
        if self._pending is asyncio.current_task():
            self._pending = None
        await fn()

    def cancel(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    async def wait(self):
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class RequestSequencer:
    def __init__(self):
        self._latest = 0

    def next(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, ticket: int) -> bool:
        return ticket == self._latest


@dataclass
class SearchState:
    query: str = ""
    sort_mode: SortMode = SortMode.LATEST
    recent_terms: List[str] = field(default_factory=list)
    expanded: Set[object] = field(default_factory=set)
    loaded_query: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None


class SearchController:
    def __init__(self, source: RecordSource, recent: RecentTermsStore,
                 debouncer: Optional[Debouncer] = None, query: str = "",
                 sort: SortMode | str = SortMode.LATEST):
        self.source = source
        self.recent = recent
        self.debouncer = debouncer or Debouncer()
        self.sequencer = RequestSequencer()
        self.state = SearchState(query=query, sort_mode=SortMode(sort), recent_terms=recent.load())
        self._rows: List[NormalizedRecord] = []

    # -- input ---------------------------------------------------------------

    def set_query(self, text: str):
        self.state.query = text or ""
        self.debouncer.trigger(self.refresh)

    def set_sort(self, mode: SortMode | str):
        self.state.sort_mode = SortMode(mode)
        self.debouncer.trigger(self.refresh)

    async def submit(self) -> List[str]:
        """Search now and remember the term."""
        self.debouncer.cancel()
        term = self.state.query.strip()
        await self.refresh()
        if term:
            self.state.recent_terms = self.recent.add(term)
        return self.state.recent_terms

    async def select_recent(self, word: str):
        term = (word or "").strip()
        if not term:
            return
        self.debouncer.cancel()
        self.state.query = term
        self.state.expanded = set()
        await self.refresh()
        self.state.recent_terms = self.recent.add(term)

    def toggle_expand(self, key) -> bool:
        if key in self.state.expanded:
            self.state.expanded.discard(key)
            return False
        self.state.expanded.add(key)
        return True

    # -- fetching ------------------------------------------------------------

    async def refresh(self):
        query = effective_query(self.state.query)
        ticket = self.sequencer.next()
        self.state.loading = True
        try:
            rows = await asyncio.to_thread(self.source.fetch, query or None)
        except RecordSourceError as exc:
            if self.sequencer.is_current(ticket):
                self._rows = []
                self.state.error = str(exc)
            log.warning("Search fetch failed (q=%r): %s", query, exc)
            return
        finally:
            if self.sequencer.is_current(ticket):
                self.state.loading = False

        if not self.sequencer.is_current(ticket):
            log.debug("Discarding stale results for q=%r", query)
            return

        if query != self.state.loaded_query:
            self.state.expanded = set()
        self._rows = newest_first(normalize_records(rows))
        self.state.loaded_query = query
        self.state.error = None

    # -- output --------------------------------------------------------------

    def results(self) -> List[NormalizedRecord]:
        return sort_records(self._rows, self.state.sort_mode, self.state.query)

    @staticmethod
    def row_key(record: NormalizedRecord, index: int):
        if record.id is not None:
            return record.id
        if is_valid_instant(record.instant):
            return record.instant
        return index

    def is_expanded(self, record: NormalizedRecord, index: int) -> bool:
        return self.row_key(record, index) in self.state.expanded

    @staticmethod
    def display_time(record: NormalizedRecord, now: Optional[int] = None) -> str:
        return format_relative(record.instant, now=now)
