"""
Azure Functions entry points for the Event Hub and Blob Storage triggers.

Each function folder (EventHubShipper/, BlobStorageShipper/) carries its own
function.json pointing at one of the entry points below; the declared trigger
type of its first binding selects how the payload is shipped. See
shipper.router.
"""
import json
import logging
from pathlib import Path
from typing import Any, List

import azure.functions as func

from shipper.router import InvocationContext, handler, load_descriptor

logger = logging.getLogger(__name__)


def _decode_event(event: func.EventHubEvent) -> Any:
    body = event.get_body()
    try:
        return json.loads(body.decode('utf-8-sig'))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Dropping undecodable Event Hub message: %s", exc)
        return None


def _as_batch(payload: Any) -> Any:
    if isinstance(payload, func.InputStream):
        return payload.read()
    if isinstance(payload, func.EventHubEvent):
        payload = [payload]
    if isinstance(payload, list):
        return [_decode_event(item) if isinstance(item, func.EventHubEvent) else item for item in payload]
    return payload


def _run(payload: Any, context: func.Context) -> None:
    descriptor = load_descriptor(Path(context.function_directory) / 'function.json')
    invocation = InvocationContext(context.invocation_id)

    handler(_as_batch(payload), invocation, descriptor)

    if invocation.failed:
        # Fails this run only; the worker keeps serving invocations.
        raise RuntimeError('; '.join(str(error) for error in invocation.errors))


def main_event_hub(events: List[func.EventHubEvent], context: func.Context) -> None:
    _run(events, context)


def main_blob(blob: func.InputStream, context: func.Context) -> None:
    _run(blob, context)
