import json

from starlette.responses import Response

from group_search.recent import CookieBackend, MemoryBackend, RecentTermsStore

KEY = "recentSearches"


class BrokenBackend:
    def get(self, key):
        raise OSError("storage unavailable")

    def set(self, key, value):
        raise OSError("quota exceeded")


class ReadOnlyBackend(MemoryBackend):
    def set(self, key, value):
        raise OSError("quota exceeded")


def _store(data=None) -> RecentTermsStore:
    return RecentTermsStore(MemoryBackend(data), key=KEY, limit=7)


def test_load_empty_store() -> None:
    assert _store().load() == []


def test_add_prepends_and_persists() -> None:
    store = _store()
    store.add("b")
    assert store.add("a") == ["a", "b"]
    assert json.loads(store.backend.get(KEY)) == ["a", "b"]
    assert store.load() == ["a", "b"]


def test_add_existing_term_promotes_without_duplicating() -> None:
    store = _store({KEY: json.dumps(["a", "b"])})
    assert store.add("a") == ["a", "b"]
    assert store.add("b") == ["b", "a"]


def test_dedup_is_case_sensitive() -> None:
    store = _store({KEY: json.dumps(["budget"])})
    assert store.add("Budget") == ["Budget", "budget"]


def test_list_is_capped_at_seven_dropping_oldest() -> None:
    store = _store()
    for i in range(8):
        result = store.add(f"t{i}")
    assert len(result) == 7
    assert result[0] == "t7"
    assert "t0" not in result


def test_add_trims_and_ignores_blank_terms() -> None:
    store = _store({KEY: json.dumps(["a"])})
    assert store.add("  b  ") == ["b", "a"]
    assert store.add("   ") == ["b", "a"]
    assert store.add(None) == ["b", "a"]


def test_corrupt_data_loads_as_empty() -> None:
    assert _store({KEY: "{not json"}).load() == []
    assert _store({KEY: json.dumps({"a": 1})}).load() == []
    assert _store({KEY: json.dumps("a")}).load() == []


def test_non_string_entries_are_dropped() -> None:
    assert _store({KEY: json.dumps(["a", 1, None, "b"])}).load() == ["a", "b"]


def test_read_failure_degrades_to_empty() -> None:
    store = RecentTermsStore(BrokenBackend(), key=KEY)
    assert store.load() == []


def test_write_failure_is_skipped() -> None:
    store = RecentTermsStore(ReadOnlyBackend({KEY: json.dumps(["a"])}), key=KEY)
    assert store.add("b") == ["b", "a"]
    assert store.load() == ["a"]


def test_defaults_come_from_settings() -> None:
    store = RecentTermsStore(MemoryBackend())
    assert store.key == "recentSearches"
    assert store.limit == 7


def test_cookie_backend_reads_request_and_queues_writes() -> None:
    backend = CookieBackend({KEY: json.dumps(["old"])})
    store = RecentTermsStore(backend, key=KEY)
    assert store.load() == ["old"]

    assert store.add("new") == ["new", "old"]
    assert store.load() == ["new", "old"]

    resp = backend.apply(Response("ok"))
    header = resp.headers["set-cookie"]
    assert header.startswith(f"{KEY}=")
    assert "HttpOnly" in header


def test_cookie_backend_without_writes_sets_nothing() -> None:
    backend = CookieBackend(None)
    resp = backend.apply(Response("ok"))
    assert "set-cookie" not in resp.headers


def test_explicit_zero_limit_is_respected() -> None:
    store = RecentTermsStore(MemoryBackend(), key=KEY, limit=0)
    assert store.limit == 0
    assert store.add("a") == []


def test_load_drops_duplicate_entries_keeping_order() -> None:
    store = _store({KEY: json.dumps(["a", "b", "a", "c", "b"])})
    assert store.load() == ["a", "b", "c"]
