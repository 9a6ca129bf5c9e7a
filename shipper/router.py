import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from pydantic import ValidationError

from .collector import IngestionEnv
from .config import ShipperSettings
from .dispatch import RecordProcessor, ServiceHttpCollector, send_blob_storage_logs, send_event_hub_logs
from .errors import ConfigurationError, ShipperError
from .record_schema import FunctionDescriptor, TriggerKind

logger = logging.getLogger(__name__)

DescriptorLike = Union[FunctionDescriptor, Mapping[str, Any]]


class InvocationContext:
    """
    Failure channel of a single invocation. The hosting runtime (or the CLI)
    inspects `failed` once the handler returns.
    """

    def __init__(self, invocation_id: Optional[str] = None):
        self.invocation_id = invocation_id
        self.errors: List[ShipperError] = []
        self.shipped = 0

    def fail(self, error: ShipperError) -> None:
        self.errors.append(error)

    @property
    def failed(self) -> bool:
        return bool(self.errors)


def load_descriptor(path: Union[str, Path]) -> FunctionDescriptor:
    """Reads a function.json binding descriptor; a UTF-8 BOM is tolerated."""
    with open(path, 'rt', encoding='utf-8-sig') as f:
        return FunctionDescriptor.model_validate(json.load(f))


def resolve_trigger_kind(descriptor: DescriptorLike) -> TriggerKind:
    """Trigger kind declared by the first binding; UNKNOWN when it cannot be told."""
    if isinstance(descriptor, FunctionDescriptor):
        return descriptor.trigger_kind
    try:
        return FunctionDescriptor.model_validate(descriptor).trigger_kind
    except ValidationError as exc:
        logger.warning("Unusable function descriptor: %s", exc)
        return TriggerKind.UNKNOWN


def active_trigger(event: Any, descriptor: DescriptorLike, collector: RecordProcessor) -> int:
    """
    Routes the batch to the dispatcher for the declared trigger. Unknown
    triggers are ignored. Returns the number of records shipped.
    """
    trigger = resolve_trigger_kind(descriptor)
    if trigger is TriggerKind.BLOB:
        return send_blob_storage_logs(event, collector)
    if trigger is TriggerKind.EVENT_HUB:
        return send_event_hub_logs(event, collector)
    logger.debug("Ignoring batch for unsupported trigger")
    return 0


def handle_error(error: ShipperError, context: InvocationContext) -> None:
    logger.error("%s", error)
    context.fail(error)


def handler(
    event: Any,
    context: InvocationContext,
    descriptor: DescriptorLike,
    environ: Optional[Mapping[str, str]] = None,
    collector: Optional[RecordProcessor] = None,
) -> None:
    """
    Reads the ingestion settings, then ships the batch.

    Faults are reported through `context.fail` and never raised: a missing
    setting stops the invocation before any record is processed, a missing
    record or a rejected post stops the rest of the batch.
    """
    try:
        settings = ShipperSettings.from_env(environ)
    except ConfigurationError as exc:
        handle_error(exc, context)
        return

    if settings.tag_patterns:
        logger.debug("Configured tags: %s", ', '.join(sorted(settings.tag_patterns)))

    owns_collector = collector is None
    if owns_collector:
        collector = ServiceHttpCollector(IngestionEnv.from_settings(settings))
    try:
        context.shipped = active_trigger(event, descriptor, collector)
        logger.info("Shipped %d record(s)", context.shipped)
    except ShipperError as exc:
        handle_error(exc, context)
    finally:
        if owns_collector:
            collector.close()
