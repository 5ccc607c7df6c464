import pytest

from quakedb.generator import build_random_map, generate_points
from quakedb.query_engine import REGIONS, QueryEngine, RangeMismatchError
from quakedb.spatial_map import Coord, SpatialTreeMap
from quakedb.storage import QuakeDB


@pytest.fixture
def engine(quake_csv):
    db = QuakeDB()
    db.ingest_data(quake_csv)
    return QueryEngine(db)


def test_point_and_range(engine):
    assert engine.point(35.1, 139.5)["COUNTRY"] == "JAPAN"
    assert engine.point(-1.0, -1.0) is None
    assert [r["COUNTRY"] for r in engine.range(*REGIONS["Italy"])] == ["ITALY"]
    assert [r["COUNTRY"] for r in engine.range(*REGIONS["Italy"], linear=True)] == ["ITALY"]


def test_compare_strategies_reports_counts(engine):
    report = engine.compare_strategies(*REGIONS["USA"], region="USA")
    assert report.region == "USA"
    assert report.locations_in_index == 7
    assert report.linear.explored == 7
    assert report.tree.explored <= report.linear.explored
    # three USA locations; the Northridge pair shares one key
    assert report.linear.found == report.tree.found == 3
    assert report.to_dict()["tree"]["found"] == 3


def test_compare_regions_covers_every_region(engine):
    reports = engine.compare_regions()
    assert [r.region for r in reports] == list(REGIONS)
    found = {r.region: r.tree.found for r in reports}
    assert found["Japan"] == 1
    assert found["Iowa"] == 0
    assert found["Los Angeles"] == 2


def test_divergent_strategies_raise(engine, monkeypatch):
    monkeypatch.setattr(SpatialTreeMap, "sub_map", lambda self, nw, se, visitor=None: [])
    with pytest.raises(RangeMismatchError):
        engine.compare_strategies(*REGIONS["USA"], region="USA")


def test_generate_points_is_deterministic():
    a = generate_points(50, seed=7)
    b = generate_points(50, seed=7)
    assert a == b
    assert generate_points(50, seed=8) != a
    assert all(isinstance(c, Coord) and len(name) == 5 for c, name in a)


def test_build_random_map_point_query():
    m, (coord, name) = build_random_map(1000)
    assert len(m) == 1000
    assert m.get(coord) == name
    assert m.tree_height() >= m.min_possible_height()
    with pytest.raises(ValueError):
        build_random_map(0)
