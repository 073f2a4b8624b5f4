"""Byte-oriented trie mapping string keys to values, with a small lookup service."""

from .errors import EmptyKeyError, InvalidIndexError, InvalidKeyError, TrieError
from .trie import Trie, TrieNode

__version__ = "1.0.0"

__all__ = [
    "Trie",
    "TrieNode",
    "TrieError",
    "EmptyKeyError",
    "InvalidIndexError",
    "InvalidKeyError",
    "__version__",
]
