
import os
import time
from quakedb.generator import build_random_map
from quakedb.query_engine import QueryEngine
from quakedb.storage import QuakeDB

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
CSV_FILE_PATH = os.environ.get("QUAKE_CSV_PATH", os.path.join(BASE_DIR, 'data', 'earthquakes.csv'))

def run_random_point_queries(n: int = 1000):
    print("--- Random data point queries ---")
    m, (coord, name) = build_random_map(n)
    print(f"Did you find {coord} -> {name}: {m.get(coord)}")
    print(f"size: {len(m)}, expected: {n}")
    print(f"actual height: {m.tree_height()}")
    print(f"minimum possible height: {m.min_possible_height()}")


def run_ingest_and_smoke_test():
    print("--- QuakeDB ingest + smoke test ---")
    db = QuakeDB()

    start_time = time.time()
    ingested = db.ingest_data(CSV_FILE_PATH)
    end_time = time.time()

    print(f"Ingested {ingested} records in {end_time - start_time:.2f}s")
    if not ingested:
        print("No records loaded.")
        return

    stats = db.index_stats()
    print(f"size: {stats['locations']}")
    print(f"actual height: {stats['height']}")
    print(f"minimum possible height: {stats['min_possible_height']}")

    # one from near the top of the NOAA file, one from near the bottom
    for lat, lon in ((31.5, 35.3), (26.374, 90.165)):
        record = db.get_record_by_location(lat, lon)
        if record is None:
            print(f"No quake recorded at ({lat}, {lon})")
        else:
            print(db.report_quake(record))

    engine = QueryEngine(db)
    for report in engine.compare_regions():
        print(f"~~ Earthquakes in {report.region} ~~")
        for label, result in (("linear search", report.linear), ("tree search", report.tree)):
            print(f"\t with {label}")
            print(f"\t\t explored {result.explored} of {report.locations_in_index}")
            print(f"\t\t found {result.found}")
            print(f"\t\t took {result.elapsed_ms:.3f} ms")


if __name__ == "__main__":
    run_random_point_queries()
    run_ingest_and_smoke_test()
