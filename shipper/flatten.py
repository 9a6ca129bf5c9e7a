import re
from typing import Any, Dict, Iterator, Tuple

KEY_SEPARATOR = '.'
SHORT_KEY_DEPTH = 2
SHORT_KEY_MAX_LENGTH = 128
INVALID_KEY_CHARS_RE = re.compile(r'[^A-Za-z0-9_]')


def _walk(value: Any, prefix: str) -> Iterator[Tuple[str, Any]]:
    if isinstance(value, dict) and value:
        for key, child in value.items():
            yield from _walk(child, f"{prefix}{KEY_SEPARATOR}{key}")
        return
    yield prefix, value


def flatten_json(document: Any) -> Dict[str, Any]:
    """
    Collapses nested objects into a single level keyed by dot-joined paths.
    Lists and scalars are leaves; an empty nested object is kept as a leaf
    so the key does not silently disappear.

    {'a': {'b': 1, 'c': [1, 2]}} -> {'a.b': 1, 'a.c': [1, 2]}
    """
    if not isinstance(document, dict):
        return {}
    flattened: Dict[str, Any] = {}
    for key, value in document.items():
        flattened.update(_walk(value, str(key)))
    return flattened


def shorten_key(path: str) -> str:
    """
    Canonical field name for a flattened path: the last two path segments
    joined with '_', restricted to [A-Za-z0-9_] and capped in length.
    Distinct paths can therefore collide; callers merge colliding values.
    """
    segments = [segment for segment in path.split(KEY_SEPARATOR) if segment]
    if not segments:
        return '_'
    short = '_'.join(segments[-SHORT_KEY_DEPTH:])
    return INVALID_KEY_CHARS_RE.sub('_', short)[:SHORT_KEY_MAX_LENGTH]
