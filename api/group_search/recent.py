"""Recently used search terms.

The browser page kept these in local storage; here the same list lives in a
key-value backend. A broken backend must never break searching, so read
failures look like an empty list and write failures are dropped.
"""

import json
import logging
from typing import Dict, List, Protocol

from .settings import settings

log = logging.getLogger(__name__)


class KeyValueBackend(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryBackend:
    def __init__(self, data: Dict[str, str] | None = None):
        self.data = dict(data or {})

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value


class CookieBackend:
    """Reads from the request's cookies and queues writes for the response."""

    max_age = 60 * 60 * 24 * 365

    def __init__(self, cookies):
        self.cookies = dict(cookies or {})
        self.pending: Dict[str, str] = {}

    def get(self, key):
        if key in self.pending:
            return self.pending[key]
        return self.cookies.get(key)

    def set(self, key, value):
        self.pending[key] = value

    def apply(self, response):
        for key, value in self.pending.items():
            response.set_cookie(key, value, max_age=self.max_age, httponly=True, samesite="lax")
        return response


class RecentTermsStore:
    def __init__(self, backend: KeyValueBackend, key: str | None = None, limit: int | None = None):
        self.backend = backend
        self.key = key or settings.RECENT_SEARCHES_KEY
        self.limit = settings.RECENT_SEARCHES_LIMIT if limit is None else limit

    def load(self) -> List[str]:
        try:
            raw = self.backend.get(self.key)
            saved = json.loads(raw) if raw else []
        except Exception as exc:
            log.warning("Recent searches unreadable, starting empty: %s", exc)
            return []
        if not isinstance(saved, list):
            return []
        # dict.fromkeys drops repeats and keeps first-seen order
        terms = dict.fromkeys(t for t in saved if isinstance(t, str))
        return list(terms)[: self.limit]

    def add(self, term: str | None) -> List[str]:
        """Promote ``term`` to the front of the list and persist it."""
        current = self.load()
        term = (term or "").strip()
        if not term:
            return current

        updated = [term, *(t for t in current if t != term)][: self.limit]
        try:
            self.backend.set(self.key, json.dumps(updated))
        except Exception as exc:
            log.warning("Failed to save recent searches: %s", exc)
        return updated
