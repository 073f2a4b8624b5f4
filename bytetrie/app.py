"""
Trie Lookup Service — A REST API over the byte trie.

Exposes :class:`bytetrie.Trie` as a JSON API with endpoints for inserting
keys, exact lookup, prefix autocompletion, longest-prefix matching, and
deletion. Built with Flask. Designed for containerized deployment.
"""

from __future__ import annotations

import os
import time
import logging
import threading
from itertools import islice
from typing import Any, Mapping

from flask import Blueprint, Flask, current_app, jsonify, request

from . import __version__
from .errors import TrieError
from .trie import Trie

logger = logging.getLogger("trie-service")

# Sample data so the service is useful out-of-the-box
_SEED_WORDS = [
    "algorithm", "api", "application", "array", "authentication",
    "binary", "branch", "buffer", "build", "byte",
    "cache", "callback", "class", "client", "compiler",
    "container", "cpu", "database", "debug", "deploy",
    "docker", "endpoint", "exception", "flask", "function",
    "gateway", "git", "graph", "hash", "heap",
    "index", "interface", "json", "kernel", "lambda",
    "linked-list", "load-balancer", "memory", "microservice", "middleware",
    "node", "object", "parser", "pipeline", "pointer",
    "prefix-tree", "process", "queue", "recursion", "redis",
    "request", "response", "rest", "router", "runtime",
    "schema", "server", "socket", "stack", "stream",
    "thread", "token", "tree", "trie", "tuple",
    "upstream", "variable", "version", "webhook", "worker",
]


# ---------------------------------------------------------------------------
# Configuration & state
# ---------------------------------------------------------------------------

def config_from_env() -> dict[str, Any]:
    """Read service settings from the environment."""
    return {
        "TRIE_MAX_KEY_LENGTH": int(os.environ.get("TRIE_MAX_KEY_LENGTH", 256)),
        "TRIE_PREFIX_LIMIT": int(os.environ.get("TRIE_PREFIX_LIMIT", 25)),
        "TRIE_SEED": os.environ.get("TRIE_SEED", "1") != "0",
    }


class TrieStore:
    """The process-wide trie plus the lock that serialises access to it."""

    def __init__(self) -> None:
        self.trie = Trie()
        self.lock = threading.Lock()
        self.started = time.time()

    def uptime(self) -> float:
        return round(time.time() - self.started, 2)


def _store() -> TrieStore:
    return current_app.extensions["trie"]


def _query() -> str:
    return request.args.get("q", "").strip()


api = Blueprint("trie", __name__)


@api.app_errorhandler(TrieError)
def handle_trie_error(exc: TrieError):
    logger.info("Rejected request: %s", exc)
    return jsonify({"error": str(exc)}), 400


# ── Health & Info ─────────────────────────────────────────────────────────

@api.route("/")
def index():
    """Landing page with API documentation."""
    return jsonify({
        "service": "Trie Lookup Service",
        "version": __version__,
        "description": "REST API for prefix lookups powered by a byte trie",
        "endpoints": {
            "GET  /":                       "This help page",
            "GET  /health":                 "Health check",
            "GET  /stats":                  "Trie statistics",
            "GET  /search?q=<key>":         "Exact match lookup",
            "GET  /prefix?q=<pfx>":         "Autocomplete — all keys starting with prefix",
            "GET  /longest-prefix?q=<key>": "Longest stored key that prefixes <key>",
            "POST /insert":                 "Insert a key  {\"key\": \"...\", \"value\": \"...\"}",
            "DELETE /delete?q=<key>":       "Delete a key",
        },
    })


@api.route("/health")
def health():
    """Liveness / readiness probe."""
    store = _store()
    with store.lock:
        size = len(store.trie)
    return jsonify({
        "status": "healthy",
        "uptime_seconds": store.uptime(),
        "trie_size": size,
    })


@api.route("/stats")
def stats():
    """Trie statistics."""
    store = _store()
    with store.lock:
        size = len(store.trie)
    return jsonify({
        "total_keys": size,
        "uptime_seconds": store.uptime(),
        "seeded": current_app.config["TRIE_SEED"],
    })


# ── Core API ──────────────────────────────────────────────────────────────

@api.route("/search")
def search():
    """Exact key lookup."""
    q = _query()
    store = _store()
    with store.lock:
        found = q in store.trie
        value = store.trie.get(q)
    return jsonify({"key": q, "found": found, "value": value})


@api.route("/prefix")
def prefix():
    """Return keys sharing a given prefix (autocomplete); empty prefix lists everything."""
    q = _query()
    limit = request.args.get("limit", current_app.config["TRIE_PREFIX_LIMIT"], type=int)
    if limit < 0:
        limit = current_app.config["TRIE_PREFIX_LIMIT"]

    store = _store()
    with store.lock:
        matches = list(islice(store.trie.keys_with_prefix(q), limit))

    return jsonify({
        "prefix": q,
        "count": len(matches),
        "matches": matches,
    })


@api.route("/longest-prefix")
def longest_prefix():
    """Longest stored key that is a prefix of the query."""
    q = _query()
    store = _store()
    with store.lock:
        match = store.trie.longest_prefix_of(q)
    return jsonify({"key": q, "found": bool(match), "prefix": match or None})


@api.route("/insert", methods=["POST"])
def insert():
    """Insert a key into the trie."""
    body = request.get_json(silent=True)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400
    key = body.get("key", "")
    if not isinstance(key, str):
        return jsonify({"error": "'key' must be a string"}), 400
    key = key.strip()
    value = body.get("value", key)

    store = _store()
    max_length = current_app.config["TRIE_MAX_KEY_LENGTH"]
    if len(store.trie.encode_key(key)) > max_length:
        return jsonify({"error": f"Key too long (max {max_length} bytes)"}), 400

    with store.lock:
        is_new = store.trie.put(key, value)
        size = len(store.trie)
    logger.info("Inserted key=%s new=%s", key, is_new)
    status = 201 if is_new else 200
    return jsonify({"inserted": key, "value": value, "new": is_new, "trie_size": size}), status


@api.route("/delete", methods=["DELETE"])
def delete():
    """Delete a key from the trie."""
    q = _query()
    store = _store()
    with store.lock:
        deleted = store.trie.delete(q)
        size = len(store.trie)
    if deleted:
        logger.info("Deleted key=%s", q)
    status = 200 if deleted else 404
    return jsonify({"key": q, "deleted": deleted, "trie_size": size}), status


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def create_app(config: Mapping[str, Any] | None = None) -> Flask:
    """Build the service; *config* overrides the environment settings."""
    app = Flask(__name__)
    app.config.update(config_from_env())
    if config:
        app.config.update(config)

    store = TrieStore()
    if app.config["TRIE_SEED"]:
        for word in _SEED_WORDS:
            store.trie.put(word, word)
        logger.info("Seeded trie with %d words", len(_SEED_WORDS))
    app.extensions["trie"] = store
    app.register_blueprint(api)
    return app


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    port = int(os.environ.get("PORT", 8080))
    debug = os.environ.get("FLASK_DEBUG", "0") == "1"
    app = create_app()
    logger.info("Starting Trie Lookup Service on port %d", port)
    app.run(host="0.0.0.0", port=port, debug=debug)
