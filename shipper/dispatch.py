import json
import logging
from datetime import datetime
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel

from .collector import HttpCollector, IngestionEnv
from .enricher import enrich
from .errors import MissingRecordsError
from .record_parser import parse_log_text
from .record_schema import BLOB_STORAGE_SOURCE, EVENT_HUB_SOURCE

logger = logging.getLogger(__name__)


class EnhancedJSONEncoder(json.JSONEncoder):
    """
    Custom JSON encoder to serialize Pydantic models and datetime objects.
    """
    def default(self, obj):
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, BaseModel):
            return obj.model_dump()
        if isinstance(obj, (bytes, bytearray)):
            return obj.decode('utf-8', errors='replace')
        return super().default(obj)


def serialize(value: Any) -> str:
    return json.dumps(value, cls=EnhancedJSONEncoder, ensure_ascii=False, separators=(',', ':'))


class RecordProcessor:
    """
    Turns a parsed record into the text handed to the sink. Subclasses supply
    post_data_to_stream.
    """

    def _process(self, record: Any, log_source: str) -> str:
        if record is None:
            raise MissingRecordsError()
        enrich(record, log_source)
        return serialize(record)

    def process_event_hub_record(self, record: Any) -> str:
        return self._process(record, EVENT_HUB_SOURCE)

    def process_blob_record(self, record: Any) -> str:
        return self._process(record, BLOB_STORAGE_SOURCE)


class ServiceHttpCollector(HttpCollector, RecordProcessor):
    def __init__(self, env: IngestionEnv, session=None):
        super().__init__(env, session=session)


def send_event_hub_logs(envelopes: Iterable[Any], collector: RecordProcessor) -> int:
    """
    Ships every record of every Event Hub envelope, one sink call per record.
    Returns the number of records shipped.
    """
    shipped = 0
    for index, envelope in enumerate(envelopes or []):
        records = envelope.get('records') if isinstance(envelope, dict) else None
        if not isinstance(records, list):
            logger.warning("Event Hub message %d has no 'records' array; skipping it", index)
            continue
        for record in records:
            collector.post_data_to_stream(collector.process_event_hub_record(record))
            shipped += 1
    return shipped


def _payload_text(payload: Any) -> str:
    if isinstance(payload, str):
        text = payload
    elif isinstance(payload, (bytes, bytearray)):
        text = bytes(payload).decode('utf-8-sig', errors='replace')
    else:
        text = serialize(payload)
    return text.strip()


def _records_array(candidate: str) -> Optional[List[Any]]:
    try:
        document = json.loads(candidate)
    except (json.JSONDecodeError, ValueError):
        return None
    if isinstance(document, dict) and isinstance(document.get('records'), list):
        return document['records']
    return None


def _structured_records(text: str, lines: List[str]) -> Optional[List[Any]]:
    """Returns the 'records' array when the blob is a single {records: [...]} document."""
    records = _records_array(text)
    if records is not None:
        return records
    records = _records_array(lines[0])
    if records is not None and len(lines) > 1:
        logger.warning(
            "Blob starts with a records document; ignoring %d following line(s)", len(lines) - 1
        )
    return records


def send_blob_storage_logs(payload: Any, collector: RecordProcessor) -> int:
    """
    Ships the records found in one blob: either the elements of a single
    {records: [...]} document, or one record per newline-delimited JSON line.
    Returns the number of records shipped.
    """
    text = _payload_text(payload)
    lines = text.split('\n')

    records = _structured_records(text, lines)
    if records is None:
        records = [parse_log_text(line) for line in lines]
    else:
        logger.debug("Blob holds a records array of %d entries", len(records))

    shipped = 0
    for record in records:
        collector.post_data_to_stream(collector.process_blob_record(record))
        shipped += 1
    return shipped
