from .indexing import InvalidPositionError, LinkedQuadTree, Quadrant, UnsupportedOperationError
from .spatial_map import (
    Comparator,
    Coord,
    CountingVisitor,
    DefaultComparator,
    InvalidKeyError,
    KeyComparator,
    PrintVisitor,
    ReverseComparator,
    SpatialTreeMap,
    Visitor,
    gps_coord,
)

__all__ = [
    "Comparator",
    "Coord",
    "CountingVisitor",
    "DefaultComparator",
    "InvalidKeyError",
    "InvalidPositionError",
    "KeyComparator",
    "LinkedQuadTree",
    "PrintVisitor",
    "Quadrant",
    "ReverseComparator",
    "SpatialTreeMap",
    "UnsupportedOperationError",
    "Visitor",
    "gps_coord",
]
