"""Record sources for the `group` table.

A source exposes ``fetch(q)``: with ``q`` it returns rows whose title,
description or writer contain ``q`` (case-insensitive), without it every
row; newest ``created_at`` first, nulls last. Failures surface as
``RecordSourceError``.
"""

from typing import List, Protocol

from ..schemas import GroupRecord

COLUMNS = ("id", "title", "description", "writer", "created_at")


class RecordSourceError(Exception):
    pass


class RecordSource(Protocol):
    def fetch(self, q: str | None = None) -> List[GroupRecord]: ...
