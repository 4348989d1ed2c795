"""Tests for core/state.py."""

from unittest.mock import patch

import pytest

from oauth2_idp.core.state import Cache, CsrfStateStore, InMemoryCache


class TestInMemoryCache:
    def test_set_and_get(self, cache):
        cache.set("k", "v", ttl=60)
        assert cache.get("k") == "v"

    def test_get_missing(self, cache):
        assert cache.get("nope") is None

    def test_entry_expires(self, cache):
        with patch("oauth2_idp.core.state.time.monotonic", return_value=1000.0):
            cache.set("k", "v", ttl=60)
        with patch("oauth2_idp.core.state.time.monotonic", return_value=1059.0):
            assert cache.get("k") == "v"
        with patch("oauth2_idp.core.state.time.monotonic", return_value=1060.0):
            assert cache.get("k") is None
            assert len(cache) == 0

    def test_overwrite(self, cache):
        cache.set("k", "first", ttl=60)
        cache.set("k", "second", ttl=60)
        assert cache.get("k") == "second"

    def test_satisfies_cache_protocol(self, cache):
        assert isinstance(cache, Cache)


class TestCsrfStateStore:
    def test_put_and_get(self, store):
        record = store.put("session-1", "state-abc")
        assert record.session_id == "session-1"
        assert record.state_token == "state-abc"
        assert record.created_at > 0
        assert store.get("session-1") == "state-abc"

    def test_get_unknown_session(self, store):
        assert store.get("unknown") is None

    def test_sessions_are_isolated(self, store):
        store.put("a", "state-a")
        store.put("b", "state-b")
        assert store.get("a") == "state-a"
        assert store.get("b") == "state-b"

    def test_new_state_replaces_old(self, store):
        store.put("a", "first")
        store.put("a", "second")
        assert store.get("a") == "second"

    def test_passes_ttl_to_cache(self):
        class RecordingCache:
            def __init__(self):
                self.calls = []

            def get(self, key):
                return None

            def set(self, key, value, ttl):
                self.calls.append((key, value, ttl))

        cache = RecordingCache()
        CsrfStateStore(cache, ttl=120).put("sid", "state")
        assert cache.calls == [("oauth2:state:sid", "state", 120)]

    @pytest.mark.parametrize("ttl", [0, -5, None])
    def test_ttl_required(self, ttl):
        with pytest.raises(ValueError):
            CsrfStateStore(InMemoryCache(), ttl=ttl)

    def test_state_expires_with_cache(self, cache):
        store = CsrfStateStore(cache, ttl=1)
        with patch("oauth2_idp.core.state.time.monotonic", return_value=0.0):
            store.put("sid", "state")
        with patch("oauth2_idp.core.state.time.monotonic", return_value=2.0):
            assert store.get("sid") is None

    def test_fractional_ttl_is_kept(self, cache):
        store = CsrfStateStore(cache, ttl=0.5)
        assert store.ttl == 0.5
        with patch("oauth2_idp.core.state.time.monotonic", return_value=10.0):
            store.put("sid", "state")
        with patch("oauth2_idp.core.state.time.monotonic", return_value=10.4):
            assert store.get("sid") == "state"
        with patch("oauth2_idp.core.state.time.monotonic", return_value=10.5):
            assert store.get("sid") is None
