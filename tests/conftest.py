import json

import pytest

from shipper.dispatch import RecordProcessor

RESOURCE_ID = (
    "/SUBSCRIPTIONS/0E0B74F5-FE07-494D-91BC-8EB65E41438B/RESOURCEGROUPS/TEMPLATE_RESOURCEGROUP"
    "/PROVIDERS/MICROSOFT.SEARCH/SEARCHSERVICES/VMWARESEARCH"
)


class RecordingCollector(RecordProcessor):
    """Keeps every payload handed to the sink."""

    def __init__(self):
        self.payloads = []

    def post_data_to_stream(self, data):
        self.payloads.append(data)

    @property
    def records(self):
        return [json.loads(payload) for payload in self.payloads]


@pytest.fixture
def collector():
    return RecordingCollector()


@pytest.fixture
def resource_id():
    return RESOURCE_ID


@pytest.fixture
def ingestion_env():
    return {
        "vRealize_Log_Insight_Cloud_API_Token": "secret-token",
        "vRealize_Log_Insight_Cloud_API_Url": "https://data.example.com/le-mans/v1/streams/ingestion-pipeline-stream",
    }
