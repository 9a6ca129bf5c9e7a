import json
import re
from typing import Any, Dict, Union

from .flatten import flatten_json, shorten_key
from .record_schema import LogRecord

EPOCH_TEXT_RE = re.compile(r'^\s*(?P<whole>[+-]?\d+)(?:\.\d+)?\s*$')


def _normalize_timestamp(value: Any) -> Any:
    """Epoch timestamps sent as text become ints, fractions truncated; anything else is left alone."""
    if not isinstance(value, str):
        return value
    match = EPOCH_TEXT_RE.match(value)
    if not match:
        return value
    numeric = int(match.group('whole'))
    return numeric or value


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(',', ':'))
    return str(value)


def parse_log_text(raw_chunk: Union[str, bytes, bytearray]) -> LogRecord:
    """
    Converts one raw JSON chunk into a flat record.

    Nested objects are flattened and their keys shortened. Leaves that
    collapse onto an already seen short key are merged as "<previous> <new>";
    null leaves are dropped. Malformed input yields an empty record.
    """
    try:
        document = json.loads(raw_chunk)
    except (json.JSONDecodeError, TypeError, ValueError):
        return {}
    if not isinstance(document, dict):
        return {}

    flattened = flatten_json(document)
    if 'timestamp' in flattened:
        flattened['timestamp'] = _normalize_timestamp(flattened['timestamp'])

    merged: Dict[str, Any] = {}
    for path, value in flattened.items():
        if value is None:
            continue
        key = shorten_key(path)
        if key in merged:
            value = f"{_stringify(merged[key])} {_stringify(value)}"
        merged[key] = value
    return merged
