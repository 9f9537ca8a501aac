import logging
from sqlalchemy.orm import Session
from sqlalchemy import select, desc, or_
from sqlalchemy.exc import SQLAlchemyError
from ..models import Group
from ..schemas import GroupRecord
from . import RecordSourceError

log = logging.getLogger(__name__)

def _like_pattern(q: str) -> str:
    escaped = q.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"

class PostgresGroupSource:
    def __init__(self, db: Session):
        self.db = db

    def fetch(self, q: str | None = None):
        stmt = select(Group).order_by(desc(Group.created_at).nulls_last(), Group.id)
        if q:
            pattern = _like_pattern(q)
            stmt = stmt.where(or_(
                Group.title.ilike(pattern, escape="\\"),
                Group.description.ilike(pattern, escape="\\"),
                Group.writer.ilike(pattern, escape="\\"),
            ))
        try:
            rows = self.db.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            log.error("Group query failed (q=%r): %s", q, exc)
            raise RecordSourceError(str(exc)) from exc
        return [
            GroupRecord(
                id=g.id,
                title=g.title,
                description=g.description,
                writer=g.writer,
                created_at=g.created_at,
            )
            for g in rows
        ]
