
import csv
import os
from typing import Any, Dict, Optional, Iterable, List
from quakedb.logger import get_logger
from quakedb.spatial_map import InvalidKeyError, SpatialTreeMap, gps_coord  # quad tree index

log = get_logger("storage")


class QuakeDB:
    # ------------------ Initialization ------------------

    def __init__(self):
        """Initializes the database with an empty data store and spatial index."""
        self.data_store: List[Dict[str, Any]] = []

        # (longitude, latitude) -> [record_id, ...]
        self.location_index: SpatialTreeMap = SpatialTreeMap()

        self.next_record_id: int = 0

    # ------------------ Accessors ------------------
    def __len__(self) -> int:
        """Return the total number of records in the database."""
        return len(self.data_store)

    # ------------------ Index helpers ------------------
    def _add_to_location_index(self, lat: float, lon: float, record_id: int) -> None:
        """Insert record_id into the location index (support duplicates)."""
        key = gps_coord(lat, lon)
        bucket = self.location_index.get(key)
        if bucket is None:
            self.location_index.put(key, [record_id])
        else:
            bucket.append(record_id)

    def _records_for(self, record_ids: Optional[List[int]]) -> List[Dict[str, Any]]:
        if record_ids is None:
            return []
        return [self.data_store[rid] for rid in record_ids if 0 <= rid < len(self.data_store)]

    # ------------------ Core mutations ------------------
    def insert_record(self, record: Dict[str, Any]) -> int:
        """Insert a single record and index it. Returns the new record ID."""
        if "latitude" not in record or "longitude" not in record:
            raise ValueError("Record must include 'latitude' and 'longitude' fields")

        lat = float(record["latitude"])
        lon = float(record["longitude"])
        # validate before touching the store so a bad key leaves no trace
        self.location_index._check_key(gps_coord(lat, lon))

        record_id = self.next_record_id
        self.next_record_id += 1
        record["latitude"] = lat
        record["longitude"] = lon
        self.data_store.append(record)
        self._add_to_location_index(lat, lon, record_id)
        return record_id

    # ------------------ Data ingestion ------------------
    def _parse_coordinate(self, raw: Any) -> Optional[float]:
        """Return the coordinate as a float, or None for blank/garbled cells."""
        if raw is None:
            return None
        raw_str = str(raw).strip()
        if not raw_str:
            return None
        try:
            return float(raw_str)
        except ValueError:
            return None

    def ingest_data(self, file_path: str, lat_column: str = 'LATITUDE', lon_column: str = 'LONGITUDE') -> int:
        """
        Reads earthquake rows from a CSV file, stores them, and indexes each one
        by its (longitude, latitude) location. Rows without usable coordinates
        are skipped. Returns the number of records ingested.
        """
        if not os.path.exists(file_path):
            log.error("File not found at %s. Please check the 'data/' folder.", file_path)
            return 0

        log.info("Ingesting data from: %s", file_path)
        total_records = 0
        skipped = 0

        with open(file_path, mode='r', newline='', encoding='utf-8') as csvfile:
            reader = csv.DictReader(csvfile)

            fieldnames = reader.fieldnames or []
            for column in (lat_column, lon_column):
                if column not in fieldnames:
                    log.warning("column '%s' not found; available columns: %s", column, fieldnames)

            for row in reader:
                lat = self._parse_coordinate(row.get(lat_column))
                lon = self._parse_coordinate(row.get(lon_column))
                if lat is None or lon is None:
                    skipped += 1
                    continue

                record = dict(row)
                record["latitude"] = lat
                record["longitude"] = lon
                try:
                    self.insert_record(record)
                except InvalidKeyError:
                    # e.g. "nan" parses as a float but has no ordering
                    skipped += 1
                    continue
                total_records += 1

                if total_records % 100000 == 0:
                    log.info("Progress: %s records ingested...", f"{total_records:,}")

        log.info("--- Ingestion Summary ---")
        log.info("Total records ingested: %s (skipped %s)", f"{total_records:,}", f"{skipped:,}")
        log.info("Distinct locations in index: %s", f"{len(self.location_index):,}")
        return total_records

    # ------------------ Core queries ------------------
    def get_record_by_location(self, lat: float, lon: float) -> Optional[Dict[str, Any]]:
        """Retrieves the first record stored at exactly (lat, lon)."""
        records = self.get_records_by_location(lat, lon)
        return records[0] if records else None

    def get_records_by_location(self, lat: float, lon: float) -> List[Dict[str, Any]]:
        """Return all records at exactly (lat, lon) (supports duplicates)."""
        return self._records_for(self.location_index.get(gps_coord(lat, lon)))

    def range_query(self, nw_lat: float, nw_lon: float, se_lat: float, se_lon: float,
                    visitor=None, linear: bool = False) -> Iterable[Dict[str, Any]]:
        """
        Yields the records inside the box with north-west corner (nw_lat, nw_lon)
        and south-east corner (se_lat, se_lon), bounds inclusive. The pruned tree
        search is used unless linear is set.
        """
        nw, se = gps_coord(nw_lat, nw_lon), gps_coord(se_lat, se_lon)
        if linear:
            entries = self.location_index.sub_map_linear(nw, se, visitor)
        else:
            entries = self.location_index.sub_map(nw, se, visitor)
        for entry in entries:
            yield from self._records_for(entry.get_value())

    def index_stats(self) -> Dict[str, int]:
        return {
            "records": len(self),
            "locations": len(self.location_index),
            "height": self.location_index.tree_height(),
            "min_possible_height": self.location_index.min_possible_height(),
        }

    # ------------------ Formatting ------------------
    @staticmethod
    def report_quake(record: Dict[str, Any]) -> str:
        return (f"In the year {record.get('YEAR', '?')}, {record.get('COUNTRY', '?')} "
                f"had a magnitude {record.get('EQ_PRIMARY', '?')} quake")
