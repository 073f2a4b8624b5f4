"""
Byte trie (prefix tree) mapping string keys to arbitrary values.

Techniques used:
  - Byte alphabet: every key is walked as raw 8-bit units, one tree level
    per byte, so a node has at most 256 children.
  - Position indexing: operations advance an integer index through the key
    instead of slicing it, so no intermediate substrings are built.
  - Subtree accounting: each node counts the keys stored strictly below it,
    which makes ``size`` O(1) and lets ``delete`` prune dead branches on the
    way back up.
  - Generator-based enumeration: ``items`` and ``keys`` yield results lazily
    in ascending byte order via an explicit stack.

Complexity (n = key length, m = number of matches):
  put / get / delete / longest_prefix_of  — O(n)
  keys_with_prefix                         — O(n + m)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Union

from .errors import EmptyKeyError, InvalidIndexError, InvalidKeyError

logger = logging.getLogger(__name__)

Key = Union[str, bytes]


def _check_index(key: bytes, index: int) -> None:
    if index < 0 or index > len(key):
        raise InvalidIndexError(key, index)


@dataclass
class TrieNode:
    """One level of the trie.

    ``size`` counts the keys terminating anywhere below this node, not
    including this node's own terminal slot. Terminal status lives in
    ``is_end`` so that ``None`` and other falsy values can be stored.
    """

    children: dict[int, TrieNode] = field(default_factory=dict)
    size: int = 0
    value: Any = None
    is_end: bool = False

    @classmethod
    def from_suffix(cls, key: bytes, value: Any, index: int = 0) -> TrieNode:
        """Build the chain of nodes spelling ``key[index:]`` and ending in *value*."""
        _check_index(key, index)
        node = cls(value=value, is_end=True)
        for i in range(len(key) - 1, index - 1, -1):
            node = cls(children={key[i]: node}, size=node.size + node.is_end)
        return node

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def put(self, key: bytes, value: Any, index: int = 0) -> bool:
        """Store *value* under ``key[index:]``. Returns ``True`` for a new key."""
        _check_index(key, index)
        path: list[TrieNode] = []
        node = self
        while index < len(key):
            byte = key[index]
            child = node.children.get(byte)
            path.append(node)
            if child is None:
                # Nothing below diverges yet; hang the whole suffix at once.
                node.children[byte] = type(self).from_suffix(key, value, index + 1)
                break
            node = child
            index += 1
        else:
            was_end = node.is_end
            node.value = value
            node.is_end = True
            if was_end:
                return False
        for ancestor in path:
            ancestor.size += 1
        return True

    def delete(self, key: bytes, index: int = 0) -> tuple[bool, bool]:
        """Remove ``key[index:]`` below this node.

        Returns ``(deleted, now_empty)``: whether a stored key was removed,
        and whether this node has neither a value nor any key below it
        afterwards. Branches left empty are detached immediately.
        """
        _check_index(key, index)
        path: list[tuple[TrieNode, int]] = []
        node = self
        while index < len(key):
            byte = key[index]
            child = node.children.get(byte)
            if child is None:
                return False, False
            path.append((node, byte))
            node = child
            index += 1

        deleted = node.is_end
        if deleted:
            node.value = None
            node.is_end = False
        empty = node.size == 0 and not node.is_end
        for parent, byte in reversed(path):
            if deleted:
                parent.size -= 1
            if empty:
                del parent.children[byte]
            empty = parent.size == 0 and not parent.is_end
        return deleted, empty

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_node(self, key: bytes, index: int = 0) -> TrieNode | None:
        """Follow ``key[index:]`` down from here; ``None`` if the path breaks."""
        _check_index(key, index)
        node: TrieNode | None = self
        for i in range(index, len(key)):
            node = node.children.get(key[i])
            if node is None:
                return None
        return node

    def contains(self, key: bytes) -> bool:
        """Return ``True`` if the path for *key* exists (stored key or prefix of one)."""
        return self.get_node(key) is not None

    def get(self, key: bytes, default: Any = None) -> Any:
        node = self.get_node(key)
        if node is None or not node.is_end:
            return default
        return node.value

    def longest_prefix_of(self, s: bytes, index: int = 0) -> bytes | None:
        """Return the longest stored key that is a prefix of *s*, or ``None``.

        The match is reported as ``s[:end]``; deeper terminals always win
        over shallower ones found on the way down.
        """
        _check_index(s, index)
        best: int | None = None
        node: TrieNode | None = self
        while node is not None:
            if node.is_end:
                best = index
            if index == len(s):
                break
            node = node.children.get(s[index])
            index += 1
        if best is None:
            return None
        return s[:best]

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def items(self, path: bytes = b"") -> Iterator[tuple[bytes, Any]]:
        """Yield ``(key, value)`` pairs at and below this node, lazily.

        *path* is the key spelled by the edges leading to this node. Output
        is depth-first pre-order with children in ascending byte order, so
        keys come out sorted and a key precedes all keys it prefixes.
        """
        stack: list[tuple[TrieNode, bytes]] = [(self, bytes(path))]
        while stack:
            current, acc = stack.pop()
            if current.is_end:
                yield acc, current.value
            for byte in sorted(current.children, reverse=True):
                stack.append((current.children[byte], acc + bytes((byte,))))

    def keys(self, path: bytes = b"") -> Iterator[bytes]:
        for key, _ in self.items(path):
            yield key


class Trie:
    """A byte-oriented prefix tree that maps string keys to arbitrary values.

    ``str`` keys are encoded with *encoding* and walked byte by byte; keys
    handed back by the trie are decoded with the same codec. Pass
    ``encoding=None`` for a trie that takes and returns ``bytes`` only.

    >>> t = Trie()
    >>> t.put("www.test.com", 1)
    True
    >>> t.put("www", 2)
    True
    >>> t.get("www.test.com")
    1
    >>> t.longest_prefix_of("www.example.com")
    'www'
    >>> list(t.keys_with_prefix("www"))
    ['www', 'www.test.com']
    """

    def __init__(
        self,
        items: Mapping[Key, Any] | Iterable[tuple[Key, Any]] | None = None,
        *,
        encoding: str | None = "utf-8",
    ) -> None:
        self._root = TrieNode()
        self._encoding = encoding
        if items is not None:
            if isinstance(items, Mapping):
                items = items.items()
            for key, value in items:
                self.put(key, value)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def put(self, key: Key, value: Any) -> bool:
        """Insert or overwrite *key*. Returns ``True`` if the key was new.

        Any value is accepted, ``None`` included.
        """
        raw = self._require_key(key, "put")
        is_new = self._root.put(raw, value)
        logger.debug("put %r (new=%s)", raw, is_new)
        return is_new

    def get(self, key: Key, default: Any = None) -> Any:
        """Return the value for *key*, or *default* if it is not stored."""
        return self._root.get(self._require_key(key, "get"), default)

    def delete(self, key: Key) -> bool:
        """Remove *key*. Returns ``True`` if it was stored."""
        raw = self._require_key(key, "delete")
        deleted, _ = self._root.delete(raw)
        logger.debug("delete %r (deleted=%s)", raw, deleted)
        return deleted

    def contains(self, key: Key) -> bool:
        """Return ``True`` if *key* is stored or is a prefix of a stored key.

        Use ``key in trie`` for exact membership.
        """
        return self._root.contains(self._require_key(key, "contains"))

    def starts_with(self, prefix: Key) -> bool:
        """Return ``True`` if any stored key begins with *prefix*."""
        node = self._root.get_node(self.encode_key(prefix))
        return node is not None and (node.is_end or node.size > 0)

    def size(self) -> int:
        return self._root.size + self._root.is_end

    def is_empty(self) -> bool:
        return self.size() == 0

    def longest_prefix_of(self, key: Key) -> Key:
        """Return the longest stored key that is a prefix of *key*.

        An empty string (or ``b""``) means no stored key matches.
        """
        raw = self._require_key(key, "longest_prefix_of")
        match = self._root.longest_prefix_of(raw)
        return self._decode(match if match is not None else b"")

    def keys_with_prefix(self, prefix: Key) -> Iterator[Key]:
        """Yield every stored key beginning with *prefix*, in byte order, lazily."""
        raw = self.encode_key(prefix)
        node = self._root.get_node(raw)
        if node is None:
            return iter(())
        return (self._decode(key) for key in node.keys(raw))

    def keys(self) -> Iterator[Key]:
        return (self._decode(key) for key in self._root.keys())

    def items(self) -> Iterator[tuple[Key, Any]]:
        return ((self._decode(key), value) for key, value in self._root.items())

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: Key) -> bool:
        node = self._root.get_node(self.encode_key(key))
        return node is not None and node.is_end

    def __iter__(self) -> Iterator[Key]:
        return self.keys()

    def __getitem__(self, key: Key) -> Any:
        node = self._root.get_node(self._require_key(key, "get"))
        if node is None or not node.is_end:
            raise KeyError(key)
        return node.value

    def __setitem__(self, key: Key, value: Any) -> None:
        self.put(key, value)

    def __delitem__(self, key: Key) -> None:
        if not self.delete(key):
            raise KeyError(key)

    def encode_key(self, key: Key) -> bytes:
        """Return the bytes *key* is stored under."""
        if isinstance(key, (bytes, bytearray, memoryview)):
            return bytes(key)
        if isinstance(key, str):
            if self._encoding is None:
                raise TypeError("this trie only accepts bytes keys")
            try:
                return key.encode(self._encoding, "surrogateescape")
            except UnicodeEncodeError as exc:
                raise InvalidKeyError(key, exc.reason) from exc
        raise TypeError(f"trie keys must be str or bytes, not {type(key).__name__}")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _decode(self, raw: bytes) -> Key:
        if self._encoding is None:
            return raw
        return raw.decode(self._encoding, "surrogateescape")

    def _require_key(self, key: Key, operation: str) -> bytes:
        raw = self.encode_key(key)
        if not raw:
            raise EmptyKeyError(operation)
        return raw
