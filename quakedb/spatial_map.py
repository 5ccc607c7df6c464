"""
Two-dimensional sorted map backed by a linked quad tree.

Keys are Coord(x, y) pairs whose components are ordered independently by
one comparator per axis. Only internal nodes of the tree carry entries;
every internal node has exactly four children, and a fresh map is a single
sentinel leaf.
"""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from quakedb.indexing import LinkedQuadTree, Position, Quadrant, UnsupportedOperationError


class InvalidKeyError(ValueError):
    """Raised when a key cannot be ordered by the map's axis comparators."""


@dataclass(frozen=True)
class Coord:
    x: Any
    y: Any

    def __str__(self) -> str:
        return f"x{self.x}y{self.y}"


def gps_coord(lat: float, lon: float) -> Coord:
    """Build a key with X as longitude and Y as latitude so NW/NE/SW/SE match geography."""
    return Coord(lon, lat)


# ------------------ Ordering ------------------
class Comparator(ABC):
    @abstractmethod
    def compare(self, a, b) -> int:
        """Return a negative number, zero or a positive number as a <, ==, > b."""
        pass


class DefaultComparator(Comparator):
    """Natural ordering of the values themselves."""

    def compare(self, a, b) -> int:
        if a < b:
            return -1
        if a > b:
            return 1
        if a == b:
            return 0
        # NaN and friends: neither less, greater nor equal
        raise TypeError(f"{a!r} and {b!r} are not ordered")


class KeyComparator(DefaultComparator):
    """Natural ordering of key(value), in the spirit of sorted(key=...)."""

    def __init__(self, key: Callable[[Any], Any]):
        self._key = key

    def compare(self, a, b) -> int:
        return super().compare(self._key(a), self._key(b))


class ReverseComparator(Comparator):
    def __init__(self, base: Optional[Comparator] = None):
        self._base = base or DefaultComparator()

    def compare(self, a, b) -> int:
        return self._base.compare(b, a)


# ------------------ Visitors ------------------
class Visitor(ABC):
    @abstractmethod
    def visit(self, p: Position) -> None:
        pass


class CountingVisitor(Visitor):
    def __init__(self):
        self.count = 0

    def visit(self, p: Position) -> None:
        self.count += 1


class PrintVisitor(Visitor):
    def __init__(self, out=None):
        self._out = out

    def visit(self, p: Position) -> None:
        print(f"visit {p.get_element()}", file=self._out or sys.stdout)


def _visit_fn(visitor) -> Callable[[Position], None]:
    if visitor is None:
        return lambda p: None
    if isinstance(visitor, Visitor):
        return visitor.visit
    if callable(visitor):
        return visitor
    raise TypeError(f"visitor must be a Visitor or a callable, got {type(visitor).__name__}")


# ------------------ Maps ------------------
class Map(ABC):

    class _MapEntry:
        """Lightweight immutable composite to store key-value pairs."""
        __slots__ = '_key', '_value'

        def __init__(self, key, value):
            self._key = key
            self._value = value

        def get_key(self): return self._key
        def get_value(self): return self._value

        def __eq__(self, other):
            return isinstance(other, Map._MapEntry) and self._key == other.get_key()

        def __hash__(self): return hash(self._key)
        def __repr__(self): return f"({self._key}, {self._value})"

    @abstractmethod
    def __len__(self) -> int:
        pass

    @abstractmethod
    def get(self, k) -> Optional[Any]:
        """Return the value associated with key k, or None."""
        pass

    @abstractmethod
    def put(self, k, v) -> Optional[Any]:
        """Insert or replace entry (k, v) and return the old value, or None."""
        pass

    @abstractmethod
    def remove(self, k) -> Optional[Any]:
        pass

    @abstractmethod
    def entry_set(self) -> List["Map._MapEntry"]:
        pass

    def is_empty(self) -> bool:
        return len(self) == 0

    def keys(self) -> Iterable[Any]:
        for entry in self.entry_set():
            yield entry.get_key()

    def values(self) -> Iterable[Any]:
        for entry in self.entry_set():
            yield entry.get_value()

    def __iter__(self) -> Iterable[Any]:
        yield from self.keys()

    def __contains__(self, k) -> bool:
        return self.get(k) is not None

    def __getitem__(self, k):
        if k not in self:
            raise KeyError(k)
        return self.get(k)

    def __setitem__(self, k, v):
        self.put(k, v)

    def __delitem__(self, k):
        self.remove(k)


class Sorted2DMap(Map):
    """A map keyed by Coord whose X and Y components each have a total ordering."""

    @abstractmethod
    def sub_map(self, nw_corner: Coord, se_corner: Coord, visitor=None) -> List[Map._MapEntry]:
        """Return the entries whose keys lie inside the box spanned by the two corners."""
        pass


class SpatialTreeMap(Sorted2DMap):
    """Map implementation using a quad search tree."""

    def __init__(self, comp_x: Optional[Comparator] = None, comp_y: Optional[Comparator] = None):
        self._comp_x = comp_x or DefaultComparator()
        self._comp_y = comp_y or DefaultComparator()
        self._tree = LinkedQuadTree()
        self._tree.add_root(None)  # sentinel leaf as root

    def _check_key(self, key) -> None:
        """Raise InvalidKeyError unless both components compare equal to themselves."""
        if not isinstance(key, Coord):
            raise InvalidKeyError(f"Key must be a Coord, got {type(key).__name__}")
        try:
            same = self._comp_x.compare(key.x, key.x) == 0 and self._comp_y.compare(key.y, key.y) == 0
        except (TypeError, ValueError) as e:
            raise InvalidKeyError(f"Incompatible key {key!r}") from e
        if not same:
            raise InvalidKeyError(f"Incompatible key {key!r}")

    def _cmp_x(self, a, b) -> int:
        try:
            return self._comp_x.compare(a, b)
        except TypeError as e:
            raise InvalidKeyError(f"{a!r} and {b!r} cannot be compared on the X axis") from e

    def _cmp_y(self, a, b) -> int:
        try:
            return self._comp_y.compare(a, b)
        except TypeError as e:
            raise InvalidKeyError(f"{a!r} and {b!r} cannot be compared on the Y axis") from e

    def __len__(self) -> int:
        # only internal nodes hold entries, each with exactly four children
        return (len(self._tree) - 1) // 4

    def size(self) -> int:
        return len(self)

    def _expand_external(self, p: Position, entry: Map._MapEntry) -> None:
        """Turn sentinel leaf p into an internal node holding entry."""
        self._tree.set(p, entry)
        self._tree.add_nw(p, None)
        self._tree.add_ne(p, None)
        self._tree.add_sw(p, None)
        self._tree.add_se(p, None)

    def _tree_search(self, p: Position, key: Coord) -> Position:
        """Return the position in p's subtree holding key, or the leaf where the search ended."""
        walk = p
        while self._tree.is_internal(walk):
            node_key = walk.get_element().get_key()
            cx = self._cmp_x(node_key.x, key.x)
            cy = self._cmp_y(node_key.y, key.y)
            if cx == 0 and cy == 0:
                return walk
            elif cx < 0 and cy > 0:
                walk = self._tree.nw(walk)
            elif cx >= 0 and cy >= 0:
                walk = self._tree.ne(walk)
            elif cx < 0 and cy <= 0:
                walk = self._tree.sw(walk)
            else:
                walk = self._tree.se(walk)
        return walk

    def get(self, k: Coord) -> Optional[Any]:
        self._check_key(k)
        p = self._tree_search(self._tree.root(), k)
        if self._tree.is_external(p):
            return None
        return p.get_element().get_value()

    def __contains__(self, k) -> bool:
        self._check_key(k)
        return self._tree.is_internal(self._tree_search(self._tree.root(), k))

    def put(self, k: Coord, v: Any) -> Optional[Any]:
        self._check_key(k)
        entry = Map._MapEntry(k, v)
        p = self._tree_search(self._tree.root(), k)
        if self._tree.is_external(p):
            self._expand_external(p, entry)
            return None
        old_entry = self._tree.set(p, entry)
        return old_entry.get_value()

    def remove(self, k: Coord) -> Optional[Any]:
        raise UnsupportedOperationError("remove is not supported by SpatialTreeMap")

    def entry_set(self) -> List[Map._MapEntry]:
        """Return all entries in breadth-first tree order (neither key nor insertion order)."""
        return [p.get_element() for p in self._tree.breadthfirst() if self._tree.is_internal(p)]

    def _in_box(self, key: Coord, nw_corner: Coord, se_corner: Coord) -> bool:
        return (self._cmp_x(key.x, nw_corner.x) >= 0
                and self._cmp_x(key.x, se_corner.x) <= 0
                and self._cmp_y(key.y, nw_corner.y) <= 0
                and self._cmp_y(key.y, se_corner.y) >= 0)

    def sub_map_linear(self, nw_corner: Coord, se_corner: Coord, visitor=None) -> List[Map._MapEntry]:
        """Brute-force range query: test every entry of the tree against the box."""
        self._check_key(nw_corner)
        self._check_key(se_corner)
        visit = _visit_fn(visitor)
        buffer = []
        for p in self._tree.breadthfirst():
            entry = p.get_element()
            if entry is None:
                continue
            visit(p)
            if self._in_box(entry.get_key(), nw_corner, se_corner):
                buffer.append(entry)
        return buffer

    def sub_map(self, nw_corner: Coord, se_corner: Coord, visitor=None) -> List[Map._MapEntry]:
        """Range query that skips subtrees which cannot intersect the box.

        Bounds are inclusive on both axes, as in sub_map_linear. An empty or
        inverted box returns an empty list without touching the tree.
        """
        self._check_key(nw_corner)
        self._check_key(se_corner)
        visit = _visit_fn(visitor)
        buffer = []
        if not (self._cmp_x(nw_corner.x, se_corner.x) < 0
                and self._cmp_y(nw_corner.y, se_corner.y) > 0):
            return buffer

        # explicit stack; children pushed in reverse so they pop NE, NW, SE, SW
        stack = [self._tree.root()]
        while stack:
            p = stack.pop()
            if self._tree.is_external(p):
                continue
            visit(p)
            entry = p.get_element()
            key = entry.get_key()
            x_nw = self._cmp_x(key.x, nw_corner.x)
            y_nw = self._cmp_y(key.y, nw_corner.y)
            x_se = self._cmp_x(key.x, se_corner.x)
            y_se = self._cmp_y(key.y, se_corner.y)
            if x_nw < 0 or y_nw > 0:
                # west or north of the box: nothing in the SE subtree can be inside
                order = (Quadrant.NE, Quadrant.NW, Quadrant.SW)
            else:
                if x_se <= 0 and y_se >= 0:
                    buffer.append(entry)
                order = (Quadrant.NE, Quadrant.NW, Quadrant.SE, Quadrant.SW)
            for q in reversed(order):
                stack.append(self._tree.child(p, q))
        return buffer

    # ------------------ Diagnostics ------------------
    def tree_height(self) -> int:
        return self._tree.height(self._tree.root())

    def min_possible_height(self) -> int:
        """Height of the shallowest quad tree that could hold this many entries."""
        height, capacity = 0, 0
        while capacity < len(self):
            capacity = capacity * 4 + 1
            height += 1
        return height

    def dump(self, out=None) -> None:
        """Write an indented, XML-like picture of the tree structure (debugging only)."""
        out = out or sys.stdout
        stack = [(self._tree.root(), 0, "ROOT")]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                out.write(item)
                continue
            p, depth, label = item
            indent = "  " * depth
            if self._tree.is_external(p):
                out.write(f"{indent}<leaf-{label}/>\n")
                continue
            key = p.get_element().get_key()
            out.write(f"{indent}<{key}-{label}>\n")
            stack.append(f"{indent}</{key}-{label}>\n")
            for q in reversed(list(Quadrant)):
                stack.append((self._tree.child(p, q), depth + 1, q.name))
