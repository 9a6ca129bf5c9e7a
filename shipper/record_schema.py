from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

# A normalized log record: flat string keys to scalar (or list) values.
LogRecord = Dict[str, Any]

LOG_TYPE = 'azure_log'
EVENT_HUB_SOURCE = 'event_hub'
BLOB_STORAGE_SOURCE = 'blob_storage'


class TriggerKind(str, Enum):
    """
    The Azure Functions trigger that delivered the current batch.
    """
    BLOB = 'blobTrigger'
    EVENT_HUB = 'eventHubTrigger'
    UNKNOWN = 'unknown'

    @classmethod
    def from_binding_type(cls, binding_type: Optional[str]) -> TriggerKind:
        for kind in (cls.BLOB, cls.EVENT_HUB):
            if binding_type == kind.value:
                return kind
        return cls.UNKNOWN


class FunctionBinding(BaseModel):
    """
    One entry of the 'bindings' array in a function.json descriptor.
    Only 'type' is consulted; connection strings, paths etc. pass through.
    """
    model_config = ConfigDict(extra='allow')

    type: str  # e.g., 'blobTrigger', 'eventHubTrigger'
    name: Optional[str] = None
    direction: Optional[str] = None


class FunctionDescriptor(BaseModel):
    """
    The static function.json document supplied by the hosting runtime.
    """
    model_config = ConfigDict(extra='allow')

    bindings: List[FunctionBinding] = Field(default_factory=list)

    @property
    def trigger_kind(self) -> TriggerKind:
        if not self.bindings:
            return TriggerKind.UNKNOWN
        return TriggerKind.from_binding_type(self.bindings[0].type)
