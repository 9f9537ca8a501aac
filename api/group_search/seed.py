import logging
from sqlalchemy.orm import Session
from sqlalchemy import select
from .db import SessionLocal, init_db
from .models import Group
from .settings import configure_logging

log = logging.getLogger(__name__)

SAMPLE_GROUPS = [
    ("Budget Plan", "Draft budget for the spring semester.", "finance", "2024-05-01T00:00:00Z"),
    ("Festival Committee", "Volunteers for the campus festival.", "events", "2024-05-20 18:30:00"),
    ("Minutes: General Assembly", "Meeting notes and decisions.", "secretary", "2024-06-01T09:00:00+09:00"),
]

def ensure_group(db: Session, title: str, description: str | None = None,
                 writer: str | None = None, created_at: str | None = None):
    existing = db.execute(select(Group).where(Group.title==title)).scalars().first()
    if existing:
        # Update in place if anything changed so seeds converge
        changed = False
        for attr, value in (("description", description), ("writer", writer), ("created_at", created_at)):
            if value is not None and getattr(existing, attr) != value:
                setattr(existing, attr, value); changed = True
        if changed:
            db.add(existing); db.commit(); db.refresh(existing)
        return existing
    g = Group(title=title, description=description, writer=writer, created_at=created_at)
    db.add(g); db.commit(); db.refresh(g)
    return g

def seed(db: Session, groups=SAMPLE_GROUPS):
    return [ensure_group(db, *g) for g in groups]

def main():
    configure_logging()
    init_db()
    db = SessionLocal()
    try:
        rows = seed(db)
        log.info("Seeded %s group(s)", len(rows))
    finally:
        db.close()

if __name__ == "__main__":
    main()
