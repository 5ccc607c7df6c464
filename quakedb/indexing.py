
from abc import ABC, abstractmethod
from collections import deque
from enum import Enum
from typing import Iterable, Any, Optional


class InvalidPositionError(RuntimeError):
    """Raised when a position does not belong to the tree or is defunct."""


class UnsupportedOperationError(NotImplementedError):
    """Raised for structural removals, which quad trees here do not support."""


class Position(ABC):
    @abstractmethod
    def get_element(self):
        """Return the element stored at this position."""
        pass

    def __eq__(self, other):
        """Return True if other is a Position representing the same location."""
        raise NotImplementedError('must be implemented by subclass')

    def __ne__(self, other):
        """Return True if other does not represent the same location."""
        return not (self == other)


class Tree(ABC):
    """Abstract base class representing a tree structure."""

    @abstractmethod
    def __len__(self) -> int:
        """Return the total number of nodes in the tree."""
        pass

    def is_empty(self) -> bool:
        """Return True if the tree is empty."""
        return len(self) == 0

    @abstractmethod
    def __iter__(self):
        """Generate an iteration of the tree's elements."""
        pass

    @abstractmethod
    def positions(self) -> Iterable[Position]:
        """Generate an iteration of the tree's positions."""
        pass

    @abstractmethod
    def root(self) -> Optional[Position]:
        """Return the root Position of the tree (or None if tree is empty)."""
        pass

    @abstractmethod
    def parent(self, p: Position) -> Optional[Position]:
        """Return the Position of p's parent (or None if p is root)."""
        pass

    @abstractmethod
    def children(self, p: Position) -> Iterable[Position]:
        """Return an iterable collection containing the children of Position p."""
        pass

    @abstractmethod
    def num_children(self, p: Position) -> int:
        """Return the number of children that Position p has."""
        pass

    def is_internal(self, p: Position) -> bool:
        """Return True if Position p has at least one child."""
        return self.num_children(p) > 0

    def is_external(self, p: Position) -> bool:
        """Return True if Position p has no children."""
        return self.num_children(p) == 0

    def is_root(self, p: Position) -> bool:
        """Return True if Position p represents the root of the tree."""
        return p == self.root()


class AbstractTree(Tree):
    """An abstract base class providing some common tree methods."""

    def depth(self, p: Position) -> int:
        """Return the number of levels separating Position p from the root."""
        levels = 0
        while not self.is_root(p):
            p = self.parent(p)
            levels += 1
        return levels

    def height(self, p: Optional[Position] = None) -> int:
        """Return the height of the subtree rooted at p (whole tree by default).

        A position without children has height 0. The walk uses an explicit
        stack so that skewed trees do not hit the interpreter recursion limit.
        """
        if p is None:
            p = self.root()
        if p is None:
            return 0
        best = 0
        stack = [(p, 0)]
        while stack:
            walk, level = stack.pop()
            if level > best:
                best = level
            for c in self.children(walk):
                stack.append((c, level + 1))
        return best

    def breadthfirst(self) -> Iterable[Position]:
        """Generate a breadth-first iteration of the positions of the tree."""
        if not self.is_empty():
            fringe = deque([self.root()])
            while fringe:
                p = fringe.popleft()
                yield p
                for c in self.children(p):
                    fringe.append(c)


class Quadrant(Enum):
    NW = 0
    NE = 1
    SW = 2
    SE = 3


class QuadTree(AbstractTree):
    """Abstract base class for a tree whose nodes have up to four named children.

    Only the element decides whether a position is internal: a position
    holding None is an external sentinel.
    """

    @abstractmethod
    def child(self, p: Position, quadrant: Quadrant) -> Optional[Position]:
        """Return the Position of p's child in the given quadrant (or None)."""
        pass

    def nw(self, p: Position) -> Optional[Position]: return self.child(p, Quadrant.NW)
    def ne(self, p: Position) -> Optional[Position]: return self.child(p, Quadrant.NE)
    def sw(self, p: Position) -> Optional[Position]: return self.child(p, Quadrant.SW)
    def se(self, p: Position) -> Optional[Position]: return self.child(p, Quadrant.SE)

    def num_children(self, p: Position) -> int:
        """Return the number of children of Position p."""
        count = 0
        for q in Quadrant:
            if self.child(p, q) is not None:
                count += 1
        return count

    def children(self, p: Position) -> Iterable[Position]:
        """Generate p's children in NW, NE, SW, SE order."""
        for q in Quadrant:
            c = self.child(p, q)
            if c is not None:
                yield c

    def is_internal(self, p: Position) -> bool:
        return p.get_element() is not None

    def is_external(self, p: Position) -> bool:
        return p.get_element() is None


class LinkedQuadTree(QuadTree):
    """Concrete implementation of a quad tree using a node-based, linked structure."""

    class _Node(Position):
        """Nested Node class that acts as a Position."""
        __slots__ = '_element', '_parent', '_children', '_container'

        def __init__(self, container, e, parent=None):
            self._container = container
            self._element = e
            self._parent = parent
            self._children = [None, None, None, None]

        def get_element(self):
            if self._parent is self:  # convention for defunct node
                raise InvalidPositionError("Position no longer valid")
            return self._element

        def get_parent(self): return self._parent
        def get_child(self, quadrant): return self._children[quadrant.value]
        def set_element(self, e): self._element = e
        def set_parent(self, parent): self._parent = parent
        def set_child(self, quadrant, child): self._children[quadrant.value] = child

        def __eq__(self, other):
            return other is self

        def __hash__(self):
            return id(self)

        def __repr__(self):
            return f"<Node {self._element!r}>"

    def __init__(self):
        self._root = None
        self._size = 0

    def _validate(self, p):
        """Validates the position and returns it as a node."""
        if not isinstance(p, self._Node):
            raise InvalidPositionError("Not valid position type")
        if p._container is not self:
            raise InvalidPositionError("p does not belong to this tree")
        if p.get_parent() is p:
            raise InvalidPositionError("p is no longer in the tree")
        return p

    def _make_node(self, e, parent=None):
        """Factory function to create a new node storing element e."""
        return self._Node(self, e, parent)

    def __len__(self) -> int: return self._size
    def root(self) -> Optional[Position]: return self._root
    def parent(self, p: Position) -> Optional[Position]: return self._validate(p).get_parent()

    def child(self, p: Position, quadrant: Quadrant) -> Optional[Position]:
        return self._validate(p).get_child(quadrant)

    def __iter__(self) -> Iterable[Any]:
        """Generate an iteration of the tree's elements in level order."""
        for p in self.breadthfirst():
            yield p.get_element()

    def positions(self) -> Iterable[Position]:
        """Generate an iteration of the tree's positions (using breadth-first traversal)."""
        yield from self.breadthfirst()

    def add_root(self, e):
        if self._root is not None: raise RuntimeError("Tree is not empty")
        self._root = self._make_node(e)
        self._size = 1
        return self._root

    def add_child(self, p, quadrant, e):
        """Create a new childless node in p's quadrant slot and return its Position."""
        parent = self._validate(p)
        if parent.get_child(quadrant) is not None:
            raise RuntimeError(f"p already has a {quadrant.name} child")
        child = self._make_node(e, parent)
        parent.set_child(quadrant, child)
        self._size += 1
        return child

    def add_nw(self, p, e): return self.add_child(p, Quadrant.NW, e)
    def add_ne(self, p, e): return self.add_child(p, Quadrant.NE, e)
    def add_sw(self, p, e): return self.add_child(p, Quadrant.SW, e)
    def add_se(self, p, e): return self.add_child(p, Quadrant.SE, e)

    def set(self, p, e):
        """Replaces the element at Position p with e and returns the replaced element."""
        node = self._validate(p)
        temp = node.get_element()
        node.set_element(e)
        return temp

    def remove(self, p):
        raise UnsupportedOperationError("This QuadTree only supports adding, not removing")
