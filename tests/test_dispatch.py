"""Tests for the Event Hub and Blob Storage batch dispatchers."""

import json
import logging
from datetime import datetime, timezone

import pytest

from shipper.dispatch import serialize, send_blob_storage_logs, send_event_hub_logs
from shipper.errors import MissingRecordsError


class TestEventHub:

    def test_single_record(self, collector, resource_id):
        batch = [{"records": [{"resourceId": resource_id, "category": "policy"}]}]
        assert send_event_hub_logs(batch, collector) == 1
        [record] = collector.records
        assert record["logsource"] == "event_hub"
        assert record["log_type"] == "azure_log"
        assert record["category"] == "ACTIVITYLOGS_POLICY"
        assert record["event_provider"] == "AZURE_SEARCH"
        assert record["eventsource"] == "SEARCHSERVICES"

    def test_records_across_envelopes_keep_order(self, collector):
        batch = [
            {"records": [{"n": 1}, {"n": 2}]},
            {"records": [{"n": 3}]},
        ]
        assert send_event_hub_logs(batch, collector) == 3
        assert [record["n"] for record in collector.records] == [1, 2, 3]

    def test_hub_records_are_not_flattened(self, collector):
        batch = [{"records": [{"properties": {"a": 1}}]}]
        send_event_hub_logs(batch, collector)
        assert collector.records[0]["properties"] == {"a": 1}

    def test_envelope_without_records_is_skipped(self, collector):
        batch = [{"body": "x"}, None, {"records": [{"n": 1}]}]
        assert send_event_hub_logs(batch, collector) == 1

    def test_null_record_aborts_batch(self, collector):
        batch = [{"records": [{"n": 1}, None, {"n": 3}]}]
        with pytest.raises(MissingRecordsError, match="does not have log records"):
            send_event_hub_logs(batch, collector)
        assert [record["n"] for record in collector.records] == [1]

    def test_empty_batch(self, collector):
        assert send_event_hub_logs([], collector) == 0
        assert collector.payloads == []


class TestBlobStorage:

    def test_newline_delimited_records(self, collector):
        assert send_blob_storage_logs('{"a":1}\n{"a":2}', collector) == 2
        records = collector.records
        assert [record["a"] for record in records] == [1, 2]
        assert all(record["logsource"] == "blob_storage" for record in records)

    def test_bytes_payload_with_bom(self, collector):
        payload = '\ufeff{"a":1}\r\n{"a":2}\n'.encode("utf-8")
        assert send_blob_storage_logs(payload, collector) == 2

    def test_records_document_ships_each_element(self, collector, resource_id):
        payload = json.dumps({"records": [
            {"resourceId": resource_id, "category": "Security", "properties": {"x": 1}},
            {"resourceId": resource_id, "category": "Alert"},
        ]})
        assert send_blob_storage_logs(payload, collector) == 2
        first, second = collector.records
        assert first["category"] == "ACTIVITYLOGS_SECURITY"
        assert first["properties"] == {"x": 1}
        assert second["category"] == "ACTIVITYLOGS_ALERT"

    def test_pretty_printed_records_document(self, collector):
        payload = json.dumps({"records": [{"a": 1}, {"a": 2}]}, indent=2)
        assert send_blob_storage_logs(payload, collector) == 2

    def test_lines_after_records_document_are_reported(self, collector, caplog):
        payload = '{"records": [{"a": 1}]}\n{"a": 2}\n{"a": 3}'
        with caplog.at_level(logging.WARNING, logger="shipper.dispatch"):
            assert send_blob_storage_logs(payload, collector) == 1
        assert "ignoring 2 following line(s)" in caplog.text

    def test_single_records_document_logs_no_warning(self, collector, caplog):
        with caplog.at_level(logging.WARNING, logger="shipper.dispatch"):
            send_blob_storage_logs('{"records": [{"a": 1}]}', collector)
        assert "ignoring" not in caplog.text

    def test_object_payload_is_serialized(self, collector):
        assert send_blob_storage_logs({"records": [{"a": 1}]}, collector) == 1
        assert collector.records[0]["a"] == 1

    def test_lines_are_parsed_and_flattened(self, collector):
        send_blob_storage_logs('{"timestamp": "1700000000", "properties": {"statusCode": "OK"}}', collector)
        record = collector.records[0]
        assert record["timestamp"] == 1700000000
        assert record["properties_statusCode"] == "OK"

    def test_malformed_line_ships_empty_record(self, collector):
        assert send_blob_storage_logs('{"a":1}\nnot json', collector) == 2
        assert set(collector.records[1]) == {"ingest_timestamp", "log_type", "logsource"}

    def test_null_element_in_records_aborts(self, collector):
        with pytest.raises(MissingRecordsError):
            send_blob_storage_logs('{"records": [{"a": 1}, null]}', collector)
        assert len(collector.payloads) == 1


def test_serialize_is_compact_and_handles_datetimes():
    moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert serialize({"a": 1, "t": moment, "s": "é"}) == '{"a":1,"t":"2024-01-02T03:04:05+00:00","s":"é"}'
