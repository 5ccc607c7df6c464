"""
Query engine over QuakeDB.

Runs point lookups and range queries against the location index and
compares the linear-scan and pruned tree strategies side by side: both
must return the same locations, and the explored-node counts show how
much of the tree the pruned search skipped.
"""

import time
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Optional, Tuple

from quakedb.logger import get_logger
from quakedb.spatial_map import CountingVisitor, gps_coord
from quakedb.storage import QuakeDB

log = get_logger("query_engine")

# (nw_lat, nw_lon, se_lat, se_lon)
REGIONS: Dict[str, Tuple[float, float, float, float]] = {
    "USA": (47.88, -127.73, 21.14, -71.16),
    "Italy": (46.381044, 3.993234, 35.536696, 20.509447),
    "Japan": (45.217357, 127.434924, 31.590234, 145.924457),
    "Iowa": (43.360882, -96.585850, 40.316970, -90.084788),
    "Los Angeles": (34.617316, -119.269167, 33.360284, -117.017954),
}


class RangeMismatchError(RuntimeError):
    """Raised when the linear and tree range searches disagree."""


@dataclass
class StrategyResult:
    explored: int
    found: int
    elapsed_ms: float


@dataclass
class RegionReport:
    region: str
    locations_in_index: int
    linear: StrategyResult
    tree: StrategyResult

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ------------------ Query Engine ------------------
class QueryEngine:
    def __init__(self, db: QuakeDB):
        self.db = db

    def point(self, lat: float, lon: float) -> Optional[Dict[str, Any]]:
        return self.db.get_record_by_location(lat, lon)

    def range(self, nw_lat: float, nw_lon: float, se_lat: float, se_lon: float,
              linear: bool = False) -> Iterable[Dict[str, Any]]:
        return self.db.range_query(nw_lat, nw_lon, se_lat, se_lon, linear=linear)

    def _timed(self, search, nw, se):
        visitor = CountingVisitor()
        start = time.perf_counter()
        entries = search(nw, se, visitor)
        elapsed_ms = (time.perf_counter() - start) * 1000
        keys = {e.get_key() for e in entries}
        return keys, StrategyResult(explored=visitor.count, found=len(entries), elapsed_ms=elapsed_ms)

    def compare_strategies(self, nw_lat: float, nw_lon: float, se_lat: float, se_lon: float,
                           region: str = "custom") -> RegionReport:
        """Run both range strategies on one box and report explored/found counts."""
        index = self.db.location_index
        nw, se = gps_coord(nw_lat, nw_lon), gps_coord(se_lat, se_lon)

        linear_keys, linear = self._timed(index.sub_map_linear, nw, se)
        tree_keys, tree = self._timed(index.sub_map, nw, se)

        if linear_keys != tree_keys:
            log.error("sub_map_linear and sub_map got different results for %s", region)
            raise RangeMismatchError(
                f"{region}: linear found {len(linear_keys)} locations, tree found {len(tree_keys)}"
            )

        log.debug("%s: tree explored %d of %d", region, tree.explored, len(index))
        return RegionReport(region=region, locations_in_index=len(index), linear=linear, tree=tree)

    def compare_regions(self, regions: Optional[Dict[str, Tuple[float, float, float, float]]] = None) -> List[RegionReport]:
        regions = REGIONS if regions is None else regions
        return [self.compare_strategies(*box, region=name) for name, box in regions.items()]
