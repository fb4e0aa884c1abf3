"""
HEALTH MONITOR - Vitals Module
==============================
Device readings, carry-forward merging and baseline seeding.
"""

from .readings import TemperatureReading, VitalsReading, DeviceReading, parse_device_payload
from .ingestion import (
    IngestionResult,
    merge_sample,
    resolve_target_user,
    ingest_reading,
    baseline_sample,
)

__all__ = [
    'TemperatureReading',
    'VitalsReading',
    'DeviceReading',
    'parse_device_payload',
    'IngestionResult',
    'merge_sample',
    'resolve_target_user',
    'ingest_reading',
    'baseline_sample',
]
