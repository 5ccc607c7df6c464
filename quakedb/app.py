import os
import time
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, request

from quakedb.logger import get_logger
from quakedb.query_engine import REGIONS, QueryEngine, RangeMismatchError
from quakedb.spatial_map import InvalidKeyError
from quakedb.storage import QuakeDB

log = get_logger("app")

app = Flask(__name__)

db = QuakeDB()
engine = QueryEngine(db)

STATE: Dict[str, Any] = {"csv_path": None, "db_loaded": False}

DEFAULT_CSV_PATH = os.environ.get("QUAKE_CSV_PATH", os.path.join(os.path.dirname(__file__), "..", "data", "earthquakes.csv"))


def ok(data=None, **extra):
    payload = {"ok": True}
    if data is not None:
        payload["data"] = data
    payload.update(extra)
    return jsonify(payload)

def err(message: str, status: int = 400, **extra):
    payload = {"ok": False, "error": message}
    payload.update(extra)
    return jsonify(payload), status

def require_db():
    if not STATE["db_loaded"]:
        return err("DB not loaded (startup ingestion failed). Check CSV path.", 400)
    return None

def warm_start(csv_path: Optional[str] = None):
    """Ingest the earthquake CSV at startup."""
    csv_path = (csv_path or DEFAULT_CSV_PATH or "").strip()
    STATE["csv_path"] = csv_path

    if not csv_path:
        log.warning("[warm_start] No CSV path provided.")
        return
    if not os.path.exists(csv_path):
        log.warning("[warm_start] CSV not found: %s", csv_path)
        return

    t0 = time.time()
    db.ingest_data(csv_path)
    t1 = time.time()
    STATE["db_loaded"] = True
    log.info("[warm_start] DB loaded: %s records in %.2fs", f"{len(db):,}", t1 - t0)

def parse_float_arg(name: str) -> Optional[float]:
    raw = (request.args.get(name) or "").strip()
    try:
        return float(raw)
    except ValueError:
        return None

def parse_limit(default: int = 50) -> int:
    limit = request.args.get("limit", str(default))
    try:
        return max(1, min(200, int(limit)))
    except ValueError:
        return default

def parse_box():
    """Return (nw_lat, nw_lon, se_lat, se_lon) from ?region= or the four corner args."""
    region = (request.args.get("region") or "").strip()
    if region:
        return REGIONS.get(region)
    box = tuple(parse_float_arg(n) for n in ("nw_lat", "nw_lon", "se_lat", "se_lon"))
    if any(v is None for v in box):
        return None
    return box


@app.get("/api/status")
def api_status():
    return ok({
        "csv_path": STATE["csv_path"],
        "db_loaded": STATE["db_loaded"],
        "records_in_store": len(db),
        "locations_in_index": len(db.location_index),
    })


@app.get("/api/index/stats")
def api_index_stats():
    r = require_db()
    if r is not None:
        return r
    return ok(db.index_stats())


@app.get("/api/quakes/point")
def api_quakes_point():
    r = require_db()
    if r is not None:
        return r

    lat = parse_float_arg("lat")
    lon = parse_float_arg("lon")
    if lat is None or lon is None:
        return err("lat and lon are required numbers: /api/quakes/point?lat=...&lon=...")

    try:
        records = db.get_records_by_location(lat, lon)
    except InvalidKeyError as e:
        return err(str(e))
    if not records:
        return err("no quake recorded at that location", 404)
    return ok({"count": len(records), "rows": records, "report": [db.report_quake(rec) for rec in records]})


@app.get("/api/quakes/range")
def api_quakes_range():
    r = require_db()
    if r is not None:
        return r

    box = parse_box()
    if box is None:
        return err("need ?region=... or nw_lat, nw_lon, se_lat, se_lon")

    strategy = (request.args.get("strategy") or "tree").strip()
    if strategy not in ("tree", "linear"):
        return err("strategy must be 'tree' or 'linear'")

    limit = parse_limit()
    rows: List[Dict[str, Any]] = []
    try:
        for rec in db.range_query(*box, linear=(strategy == "linear")):
            rows.append(rec)
            if len(rows) >= limit:
                break
    except InvalidKeyError as e:
        return err(str(e))

    return ok({"strategy": strategy, "count_returned": len(rows), "rows": rows})


@app.get("/api/quakes/compare")
def api_quakes_compare():
    r = require_db()
    if r is not None:
        return r

    box = parse_box()
    if box is None:
        return err("need ?region=... or nw_lat, nw_lon, se_lat, se_lon")

    region = (request.args.get("region") or "custom").strip()
    try:
        report = engine.compare_strategies(*box, region=region)
    except InvalidKeyError as e:
        return err(str(e))
    except RangeMismatchError as e:
        return err(str(e), 500)
    return ok(report.to_dict())


@app.post("/api/quakes/insert")
def api_quakes_insert():
    data = request.get_json(silent=True) or {}
    missing = [k for k in ("latitude", "longitude") if k not in data]
    if missing:
        return err(f"missing fields: {missing}")

    try:
        new_id = db.insert_record(dict(data))
    except (ValueError, TypeError) as e:
        return err(f"insert rejected: {e}")

    STATE["db_loaded"] = True
    return ok({"record_id": new_id, "record": db.data_store[new_id]})


if __name__ == "__main__":
    warm_start()
    app.run(host="127.0.0.1", port=5000, debug=True, use_reloader=False)
