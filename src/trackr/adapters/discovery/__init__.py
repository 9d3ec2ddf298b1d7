"""Public interface for the discovery payload adapter."""

from __future__ import annotations

from .schema import (
    CsvRowPayload,
    DiscoveryBaseModel,
    DiscoveryPayload,
    IntuneDevicePayload,
    JamfComputerPayload,
    ManualEntryPayload,
    MdmDevicePayload,
)
from .translator import PAYLOAD_MODELS, translate_batch, translate_payload

__all__ = [
    "PAYLOAD_MODELS",
    "CsvRowPayload",
    "DiscoveryBaseModel",
    "DiscoveryPayload",
    "IntuneDevicePayload",
    "JamfComputerPayload",
    "ManualEntryPayload",
    "MdmDevicePayload",
    "translate_batch",
    "translate_payload",
]
