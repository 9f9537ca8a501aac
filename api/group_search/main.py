import logging
from fastapi import FastAPI, Depends, Query, HTTPException, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from .db import SessionLocal, init_db
from .recent import CookieBackend, RecentTermsStore
from .schemas import SearchResponse
from .search import search_groups, to_item
from .settings import settings, configure_logging
from .sources import RecordSourceError
from .sources.postgres import PostgresGroupSource
from .sources.rest import RestGroupSource
from .templates import render
from .timeutil import now_ms

log = logging.getLogger(__name__)

app = FastAPI(title="Group Search")

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_record_source(db: Session = Depends(get_db)):
    if settings.RECORD_SOURCE == "rest":
        return RestGroupSource()
    return PostgresGroupSource(db)

def _run_search(source, q, sort):
    try:
        return search_groups(source, q=q, sort=sort)
    except RecordSourceError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

@app.on_event("startup")
def startup_event():
    configure_logging()
    if settings.RECORD_SOURCE == "postgres":
        init_db()
    log.info("Group search ready (source=%s)", settings.RECORD_SOURCE)

@app.get("/", response_class=HTMLResponse)
@app.get("/search", response_class=HTMLResponse)
def search_page(request: Request, source=Depends(get_record_source),
                q: str | None = Query(None), sort: str | None = Query(None)):
    rows, query, mode = _run_search(source, q, sort)

    cookies = CookieBackend(request.cookies)
    store = RecentTermsStore(cookies)
    recent = store.add(query) if query else store.load()

    now = now_ms()
    resp = render("search.html", {
        "q": query,
        "sort": mode.value,
        "items": [to_item(r, now=now) for r in rows],
        "recent": recent,
        "locale": settings.DISPLAY_LOCALE,
    })
    return cookies.apply(resp)

@app.get("/api/search", response_model=SearchResponse)
def search_api(source=Depends(get_record_source),
               q: str | None = Query(None), sort: str | None = Query(None)):
    rows, query, mode = _run_search(source, q, sort)
    now = now_ms()
    items = [to_item(r, now=now) for r in rows]
    return {"q": query, "sort": mode.value, "items": items, "count": len(items)}

@app.get("/healthz")
def healthz():
    return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}
