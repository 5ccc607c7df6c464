import pytest

from quakedb.spatial_map import Coord, SpatialTreeMap

SMALL_KEYS = [(0, 0), (-3, 4), (3, 2), (-5, -6), (6, -5), (10, 12), (7, 7)]

QUAKES_CSV = """\
I_D,YEAR,COUNTRY,LATITUDE,LONGITUDE,EQ_PRIMARY
1,-2150,JORDAN,31.5,35.3,7.3
2,1906,USA,37.75,-122.55,7.7
3,1933,USA,33.75,-118.083,6.4
4,1908,ITALY,38.15,15.68,7.0
5,1923,JAPAN,35.1,139.5,7.9
6,1950,INDIA,26.374,90.165,
7,1800,NOWHERE,,10.0,5.0
8,1801,NOWHERE,abc,10.0,5.0
9,1802,NOWHERE,nan,10.0,5.0
10,1994,USA,34.213,-118.537,6.7
11,1994,USA,34.213,-118.537,5.9
"""


def build_map(keys):
    m = SpatialTreeMap()
    for i, (x, y) in enumerate(keys):
        m.put(Coord(x, y), i)
    return m


def assert_quad_invariants(m):
    """Every internal node has four linked children; every external node is a bare leaf."""
    tree = m._tree
    for p in tree.breadthfirst():
        if tree.is_internal(p):
            kids = list(tree.children(p))
            assert len(kids) == 4
            assert all(tree.parent(c) is p for c in kids)
        else:
            assert p.get_element() is None
            assert tree.num_children(p) == 0
    assert len(m) == (len(tree) - 1) // 4
    assert (len(tree) - 1) % 4 == 0


@pytest.fixture
def small_map():
    return build_map(SMALL_KEYS)


@pytest.fixture
def medium_map():
    m = SpatialTreeMap()
    k = 0
    for i in range(-20, 20, 8):
        for j in range(-20, 20, 8):
            m.put(Coord(i, j), k)
            k += 1
    return m


@pytest.fixture
def quake_csv(tmp_path):
    path = tmp_path / "earthquakes.csv"
    path.write_text(QUAKES_CSV, encoding="utf-8")
    return str(path)
