import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from shipper.dispatch import RecordProcessor
from shipper.errors import ShipperError
from shipper.record_schema import FunctionDescriptor, FunctionBinding, TriggerKind
from shipper.router import InvocationContext, active_trigger, handler, load_descriptor

TRIGGER_CHOICES = {
    'blob': TriggerKind.BLOB,
    'eventhub': TriggerKind.EVENT_HUB,
}


class EchoCollector(RecordProcessor):
    """
    Prints serialized records instead of posting them.
    """
    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self.sent = 0

    def post_data_to_stream(self, data: str) -> None:
        self.stream.write(data)
        self.stream.write('\n')
        self.sent += 1


def _load_event_hub_batch(file_path: Path) -> List[Any]:
    """
    Loads Event Hub envelopes from a JSON array, a single envelope object,
    or a JSONL file with one envelope per line.
    """
    with open(file_path, 'rt', encoding='utf-8-sig') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError:
            f.seek(0)
            return [json.loads(line) for line in f if line.strip()]
    if isinstance(data, list):
        return data
    return [data]


def _load_event(file_path: Path, trigger: TriggerKind) -> Any:
    if trigger is TriggerKind.EVENT_HUB:
        return _load_event_hub_batch(file_path)
    return file_path.read_bytes()


def _build_descriptor(args) -> FunctionDescriptor:
    if args.descriptor:
        return load_descriptor(args.descriptor)
    trigger = TRIGGER_CHOICES[args.trigger]
    return FunctionDescriptor(bindings=[FunctionBinding(type=trigger.value, direction='in')])


def _replay(event: Any, descriptor: FunctionDescriptor, dry_run: bool) -> InvocationContext:
    context = InvocationContext()
    if not dry_run:
        handler(event, context, descriptor)
        return context
    try:
        context.shipped = active_trigger(event, descriptor, EchoCollector())
    except ShipperError as e:
        context.fail(e)
    return context


def main(argv: Optional[List[str]] = None):
    """
    Replay a saved blob or Event Hub batch through the shipping pipeline.
    """
    parser = argparse.ArgumentParser(
        description="Normalize Azure log batches and ship them to the ingestion endpoint."
    )
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Blob contents, or a JSON/JSONL file of Event Hub messages ({\"records\": [...]})."
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--trigger",
        choices=sorted(TRIGGER_CHOICES),
        help="Treat the input as delivered by this trigger."
    )
    source.add_argument(
        "--descriptor",
        type=Path,
        help="function.json whose first binding declares the trigger."
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the normalized records instead of posting them."
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output to stderr."
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.input.is_file():
        print(f"Error: Input path '{args.input}' is not a file.", file=sys.stderr)
        sys.exit(1)

    try:
        descriptor = _build_descriptor(args)
    except (OSError, ValueError) as e:
        print(f"Error reading descriptor '{args.descriptor}': {e}", file=sys.stderr)
        sys.exit(1)

    trigger = descriptor.trigger_kind
    try:
        event = _load_event(args.input, trigger)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error reading input '{args.input}': {e}", file=sys.stderr)
        sys.exit(1)

    context = _replay(event, descriptor, args.dry_run)

    print("\nSummary:", file=sys.stderr)
    print(f"  Trigger : {trigger.value}", file=sys.stderr)
    print(f"  Shipped : {context.shipped}", file=sys.stderr)
    for error in context.errors:
        print(f"  Failed  : {error}", file=sys.stderr)
    if context.failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
