import logging
import requests
from typing import Any, Dict, List, Optional
from ..schemas import GroupRecord
from ..settings import settings
from . import COLUMNS, RecordSourceError

log = logging.getLogger(__name__)

def _quote(value: str) -> str:
    # PostgREST reserves , . : ( ) inside or=(...); a double-quoted value is taken literally
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'

def build_params(q: Optional[str]) -> Dict[str, str]:
    params = {
        "select": ",".join(COLUMNS),
        "order": "created_at.desc.nullslast",
    }
    if q:
        pat = _quote(f"*{q}*")
        params["or"] = f"(title.ilike.{pat},description.ilike.{pat},writer.ilike.{pat})"
    return params

def _error_message(r: requests.Response) -> str:
    try:
        js = r.json()
    except ValueError:
        return f"HTTP {r.status_code}"
    if isinstance(js, dict) and js.get("message"):
        return js["message"]
    return f"HTTP {r.status_code}"

class RestGroupSource:
    """
    Reads the table through the Supabase REST (PostgREST) endpoint.

    - Authenticates with the project's anon/publishable key.
    - Raises RecordSourceError on transport errors, non-2xx answers and
      payloads that are not a JSON array.
    """

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None,
                 table: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or settings.SUPABASE_URL or "").rstrip("/")
        self.api_key = api_key or settings.SUPABASE_ANON_KEY
        self.table = table or settings.GROUP_TABLE
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": "group-search/0.1",
        }
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def fetch(self, q: Optional[str] = None) -> List[GroupRecord]:
        if not self.base_url:
            raise RecordSourceError("SUPABASE_URL is not configured")
        try:
            r = self.session.get(self.endpoint, params=build_params(q),
                                 headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as exc:
            log.error("Group REST query failed (q=%r): %s", q, exc)
            raise RecordSourceError(str(exc)) from exc

        if not r.ok:
            msg = _error_message(r)
            log.error("Group REST query rejected (q=%r): %s", q, msg)
            raise RecordSourceError(msg)

        try:
            data: Any = r.json()
        except ValueError as exc:
            raise RecordSourceError("invalid JSON from record source") from exc
        if not isinstance(data, list):
            raise RecordSourceError("unexpected payload from record source")

        log.debug("Group REST query q=%r returned %s row(s)", q, len(data))
        try:
            return [GroupRecord(**{k: row.get(k) for k in COLUMNS}) for row in data if isinstance(row, dict)]
        except ValueError as exc:
            raise RecordSourceError(f"malformed row from record source: {exc}") from exc
