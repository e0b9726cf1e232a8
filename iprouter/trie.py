"""Binary trie over route prefixes for longest-prefix-match lookups."""

from __future__ import annotations

from dataclasses import dataclass, field

from .tables import RouteEntry

_ALL_ONES = 0xFFFFFFFF


@dataclass(slots=True)
class _Node:
    entry: RouteEntry | None = None
    children: list[_Node | None] = field(default_factory=lambda: [None, None])


def _prefix_length(mask: int) -> int:
    inverted = ~mask & _ALL_ONES
    if inverted & (inverted + 1):
        raise ValueError(f"mask {mask:#010x} is not a contiguous prefix mask")
    return bin(mask & _ALL_ONES).count("1")


def _bits(address: int, count: int):
    """Yield the leading `count` bits of a 32-bit address, most significant first."""
    for position in range(count):
        yield (address >> (31 - position)) & 1


class RouteTrie:
    """Routes keyed by the bits of their prefix, one level per mask bit."""

    def __init__(self) -> None:
        self._root = _Node()

    def add(self, entry: RouteEntry) -> None:
        """Store a route; a later route with the same prefix and mask replaces it."""
        node = self._root
        for bit in _bits(entry.prefix, _prefix_length(entry.mask)):
            child = node.children[bit]
            if child is None:
                child = node.children[bit] = _Node()
            node = child
        node.entry = entry

    def lookup(self, address: int) -> RouteEntry | None:
        """Return the route with the longest prefix matching address, if any."""
        best = None
        node: _Node | None = self._root
        for bit in _bits(address, 33):
            if node is None:
                break
            if node.entry is not None:
                best = node.entry
            if bit is None:
                break
            node = node.children[bit]
        return best