"""
Deterministic random datasets for point-query experiments.

Keys are Coord pairs of 32-bit signed integers; values are five-letter
names. The same seed always yields the same data.
"""

import random
import string
from typing import List, Tuple

from quakedb.spatial_map import Coord, SpatialTreeMap

INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1


def generate_points(n: int, seed: int = 2230) -> List[Tuple[Coord, str]]:
    rng = random.Random(seed)
    points = []
    for _ in range(n):
        name = "".join(rng.choice(string.ascii_letters) for _ in range(5))
        points.append((Coord(rng.randint(INT_MIN, INT_MAX), rng.randint(INT_MIN, INT_MAX)), name))
    return points


def build_random_map(n: int, seed: int = 2230) -> Tuple[SpatialTreeMap, Tuple[Coord, str]]:
    """Fill a SpatialTreeMap with n random points; also return one of them to look up."""
    if n <= 0:
        raise ValueError("n must be positive")
    points = generate_points(n, seed)
    pick = random.Random(seed).randrange(n)
    m = SpatialTreeMap()
    for coord, name in points:
        m.put(coord, name)
    return m, points[pick]
