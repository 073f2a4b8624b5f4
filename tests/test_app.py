"""Tests for the Flask trie lookup service."""

import pytest

from bytetrie.app import create_app


@pytest.fixture
def client():
    app = create_app({"TESTING": True, "TRIE_SEED": False, "TRIE_PREFIX_LIMIT": 2})
    return app.test_client()


def _insert(client, key, value=None):
    body = {"key": key} if value is None else {"key": key, "value": value}
    return client.post("/insert", json=body)


class TestServiceInfo:
    """Help, health and stats endpoints."""

    def test_index(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "GET  /longest-prefix?q=<key>" in resp.get_json()["endpoints"]

    def test_health(self, client):
        _insert(client, "www.test.com")
        data = client.get("/health").get_json()
        assert data["status"] == "healthy"
        assert data["trie_size"] == 1

    def test_seeded_by_default(self, monkeypatch):
        monkeypatch.delenv("TRIE_SEED", raising=False)
        app = create_app({"TESTING": True})
        data = app.test_client().get("/stats").get_json()
        assert data["seeded"] is True
        assert data["total_keys"] > 0

    def test_seed_disabled_from_env(self, monkeypatch):
        monkeypatch.setenv("TRIE_SEED", "0")
        app = create_app({"TESTING": True})
        assert app.test_client().get("/stats").get_json()["total_keys"] == 0


class TestServiceCrud:
    """Insert, search and delete."""

    def test_insert_and_search(self, client):
        resp = _insert(client, "www.test.com", 7)
        assert resp.status_code == 201
        assert resp.get_json()["new"] is True

        data = client.get("/search", query_string={"q": "www.test.com"}).get_json()
        assert data == {"key": "www.test.com", "found": True, "value": 7}

    def test_insert_update(self, client):
        _insert(client, "www.test.com", 1)
        resp = _insert(client, "www.test.com", 2)
        assert resp.status_code == 200
        assert resp.get_json()["trie_size"] == 1

    def test_value_defaults_to_key(self, client):
        _insert(client, "www")
        assert client.get("/search?q=www").get_json()["value"] == "www"

    def test_search_missing(self, client):
        data = client.get("/search?q=nothing").get_json()
        assert data["found"] is False
        assert data["value"] is None

    def test_empty_key_rejected(self, client):
        assert _insert(client, "").status_code == 400
        resp = client.get("/search?q=")
        assert resp.status_code == 400
        assert "empty" in resp.get_json()["error"]
        assert client.delete("/delete?q=").status_code == 400

    def test_non_string_key_rejected(self, client):
        assert client.post("/insert", json={"key": 5}).status_code == 400

    @pytest.mark.parametrize("body", ['["x"]', "42", '"www"', "null"])
    def test_non_object_body_rejected(self, client, body):
        """Any JSON body that is not an object is a client error."""
        resp = client.post("/insert", data=body, content_type="application/json")
        assert resp.status_code == 400
        assert "error" in resp.get_json()

    def test_unencodable_key_rejected(self, client):
        """A key with a lone surrogate is refused before it reaches the trie."""
        resp = client.post("/insert", data='{"key": "\\ud800"}', content_type="application/json")
        assert resp.status_code == 400
        assert "cannot be encoded" in resp.get_json()["error"]
        assert client.get("/stats").get_json()["total_keys"] == 0

    def test_key_too_long(self):
        app = create_app({"TESTING": True, "TRIE_SEED": False, "TRIE_MAX_KEY_LENGTH": 4})
        client = app.test_client()
        assert _insert(client, "abcd").status_code == 201
        assert _insert(client, "abcde").status_code == 400

    def test_delete(self, client):
        _insert(client, "www.test.com")
        _insert(client, "www.example.com")
        resp = client.delete("/delete?q=www.test.com")
        assert resp.status_code == 200
        assert resp.get_json()["trie_size"] == 1
        assert client.delete("/delete?q=www.test.com").status_code == 404
        assert client.get("/search?q=www.example.com").get_json()["found"] is True


class TestServicePrefixQueries:
    """Autocomplete and longest-prefix endpoints."""

    def test_prefix(self, client):
        for key in ("www.test.com", "www.example.com", "example.com"):
            _insert(client, key)
        data = client.get("/prefix?q=www").get_json()
        assert data["matches"] == ["www.example.com", "www.test.com"]
        assert data["count"] == 2

    def test_prefix_limit(self, client):
        for key in ("a", "ab", "abc"):
            _insert(client, key)
        assert client.get("/prefix?q=a").get_json()["matches"] == ["a", "ab"]
        assert client.get("/prefix?q=a&limit=1").get_json()["matches"] == ["a"]

    def test_empty_prefix_lists_all(self, client):
        _insert(client, "b")
        _insert(client, "a")
        assert client.get("/prefix?q=").get_json()["matches"] == ["a", "b"]

    def test_longest_prefix(self, client):
        for key in ("www.test.com", "www.test", "www"):
            _insert(client, key)
        data = client.get("/longest-prefix?q=www.test.co.uk").get_json()
        assert data == {"key": "www.test.co.uk", "found": True, "prefix": "www.test"}

    def test_longest_prefix_no_match(self, client):
        _insert(client, "www")
        data = client.get("/longest-prefix?q=nomatch").get_json()
        assert data["found"] is False
        assert data["prefix"] is None
