"""Exceptions raised by the byte trie."""

from __future__ import annotations


class TrieError(Exception):
    """Base class for every error raised by :mod:`bytetrie`."""


class EmptyKeyError(TrieError, ValueError):
    """An operation that needs a non-empty key was given an empty one."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation}: key must not be empty")
        self.operation = operation


class InvalidIndexError(TrieError, IndexError):
    """A byte position outside ``[0, len(key)]`` reached the node layer."""

    def __init__(self, key: bytes, index: int) -> None:
        super().__init__(f"index {index} out of range [0, {len(key)}] for key {key!r}")
        self.key = key
        self.index = index


class InvalidKeyError(TrieError, ValueError):
    """A ``str`` key could not be encoded into bytes."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"key {key!r} cannot be encoded: {reason}")
        self.key = key
