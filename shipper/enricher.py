import time
from typing import Any

from .provenance import resolve_provenance
from .record_schema import LOG_TYPE


def _now_millis() -> int:
    return int(time.time() * 1000)


def _enrich_record(record: dict, log_source: str, ingestion_time: int) -> None:
    resolve_provenance(record)
    record['ingest_timestamp'] = ingestion_time
    record['log_type'] = LOG_TYPE
    record['logsource'] = log_source


def enrich(records: Any, log_source: str) -> None:
    """
    Adds ingest_timestamp, log_type, logsource and provenance fields in place.
    Accepts a single record or a list of records; anything that is not a
    mapping is left untouched.
    """
    ingestion_time = _now_millis()
    if isinstance(records, (list, tuple)):
        for record in records:
            if isinstance(record, dict):
                _enrich_record(record, log_source, ingestion_time)
    elif isinstance(records, dict):
        _enrich_record(records, log_source, ingestion_time)
