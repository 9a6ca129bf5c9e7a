import logging
from typing import List, Optional

from .record_schema import LogRecord

logger = logging.getLogger(__name__)

ACTIVITY_CATEGORIES = [
    'ADMINISTRATIVE',
    'SECURITY',
    'SERVICEHEALTH',
    'ALERT',
    'RECOMMENDATION',
    'POLICY',
    'AUTOSCALE',
    'RESOURCEHEALTH',
]
ACTIVITY_CATEGORY_PREFIX = 'ACTIVITYLOGS_'
PROVIDER_NAMESPACE_PREFIX = 'MICROSOFT.'
EVENT_PROVIDER_PREFIX = 'AZURE_'


def _resource_id(record: LogRecord) -> Optional[str]:
    for key in ('resourceId', 'ResourceId'):
        value = record.get(key)
        if value and isinstance(value, str):
            return value
    return None


def _event_provider(segments: List[str]) -> Optional[str]:
    provider = None
    for segment in segments:
        if segment.upper().startswith(PROVIDER_NAMESPACE_PREFIX):
            # Later namespaces override earlier ones (nested resource types).
            provider = EVENT_PROVIDER_PREFIX + segment.split('.')[1].upper()
    return provider


def _activity_category(category) -> Optional[str]:
    if not isinstance(category, str):
        return None
    upper = category.upper()
    for candidate in ACTIVITY_CATEGORIES:
        if candidate == upper:
            return ACTIVITY_CATEGORY_PREFIX + candidate
    return None


def resolve_provenance(record: LogRecord) -> None:
    """
    Derives event_provider and eventsource from the record's resource path and
    normalizes Activity Log category labels, in place.

    Example: resourceId "/SUBSCRIPTIONS/<sub>/RESOURCEGROUPS/<rg>/PROVIDERS/
    MICROSOFT.SEARCH/SEARCHSERVICES/VMWARESEARCH" yields
    event_provider="AZURE_SEARCH" and eventsource="SEARCHSERVICES".
    """
    resource_id = _resource_id(record)
    if resource_id is None:
        logger.error('Could not find resourceId for the log record')
        return

    # Format: /subscriptions/{sub}/resourceGroups/{rg}/providers/{namespace}/{type}/{name}
    segments = resource_id[1:].split('/')

    provider = _event_provider(segments)
    if provider:
        record['event_provider'] = provider

    category = _activity_category(record.get('category'))
    if category:
        record['category'] = category

    if len(segments) >= 2 and segments[-2].upper() != 'PROVIDERS':
        record['eventsource'] = segments[-2]
