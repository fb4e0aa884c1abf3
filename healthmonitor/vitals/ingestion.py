"""
HEALTH MONITOR - Device Ingestion
=================================
Turns a device reading into a new vital sample for the device's user.

A reading only carries the values the device measured. The rest of the
sample is carried forward from the user's latest sample (or defaults), and
a new row is always appended; existing samples are never modified.
"""

import logging
import random
from dataclasses import dataclass
from typing import Optional, Union

from healthmonitor.auth.models import Role
from healthmonitor.database import DataStore, NewVitalSample, User, VitalSample
from healthmonitor.database.entities import WAVEFORM_FIELDS
from healthmonitor.errors import NotFound
from .readings import TemperatureReading, VitalsReading

logger = logging.getLogger(__name__)

DEFAULT_HEART_RATE = 70
DEFAULT_SPO2 = 98
DEFAULT_SYSTOLIC_BP = 120
DEFAULT_DIASTOLIC_BP = 80
DEFAULT_TEMPERATURE = 37.0
DEFAULT_RESPIRATORY_RATE = 20


@dataclass
class IngestionResult:
    sample: VitalSample
    reading: Union[TemperatureReading, VitalsReading]


def _carry(previous: Optional[VitalSample], name: str, default):
    if previous is None:
        return default
    value = getattr(previous, name)
    return default if value is None else value


def merge_sample(previous: Optional[VitalSample],
                 reading: Union[TemperatureReading, VitalsReading],
                 user_id: str) -> NewVitalSample:
    """
    Build the next sample from the previous one and a device reading.

    Pure function: `previous` is not modified.
    """
    merged = NewVitalSample(
        user_id=user_id,
        record_id=previous.record_id if previous else None,
        heart_rate=_carry(previous, "heart_rate", DEFAULT_HEART_RATE),
        spo2=_carry(previous, "spo2", DEFAULT_SPO2),
        systolic_bp=_carry(previous, "systolic_bp", DEFAULT_SYSTOLIC_BP),
        diastolic_bp=_carry(previous, "diastolic_bp", DEFAULT_DIASTOLIC_BP),
        temperature=_carry(previous, "temperature", DEFAULT_TEMPERATURE),
        respiratory_rate=_carry(previous, "respiratory_rate", DEFAULT_RESPIRATORY_RATE),
        **{name: getattr(previous, name) if previous else None for name in WAVEFORM_FIELDS},
    )

    if isinstance(reading, TemperatureReading):
        merged.temperature = float(reading.temperature)
    elif isinstance(reading, VitalsReading):
        if reading.heart_rate is not None:
            merged.heart_rate = int(reading.heart_rate)
        if reading.spo2 is not None:
            merged.spo2 = int(round(reading.spo2))

    return merged


def resolve_target_user(store: DataStore, device_id: str) -> User:
    """
    Find the user a device reports for.

    A registered device binding wins. Unbound devices fall back to the first
    patient, then the first user of any role.

    Raises:
        NotFound: no users exist
    """
    binding = store.get_device_binding(device_id)
    if binding is not None:
        user = store.get_user_by_id(binding.user_id)
        if user is not None:
            return user
        logger.warning(f"Device {device_id} is bound to missing user {binding.user_id}")

    users = store.list_users()
    if not users:
        raise NotFound("No user found to associate device data with")

    for user in users:
        if user.role == Role.PATIENT:
            logger.info(f"Device {device_id} is unbound; attributing data to first patient {user.id}")
            return user

    logger.info(f"Device {device_id} is unbound and no patients exist; using user {users[0].id}")
    return users[0]


def ingest_reading(store: DataStore, reading: Union[TemperatureReading, VitalsReading]) -> IngestionResult:
    """Resolve the target user, merge with their latest sample and append."""
    user = resolve_target_user(store, reading.device_id)
    previous = store.get_latest_vital_sample(user.id)
    sample = store.create_vital_sample(merge_sample(previous, reading, user.id))
    logger.info(f"Stored {reading.data_type} reading from device {reading.device_id} as sample {sample.id}")
    return IngestionResult(sample=sample, reading=reading)


def baseline_sample(user_id: str, rng: Optional[random.Random] = None) -> NewVitalSample:
    """
    Plausible resting vitals used to seed a newly registered patient.

    Ranges: heart rate 60-79, SpO2 95-99, systolic 110-129, diastolic 70-84,
    temperature 36.5-38.0, respiratory rate 16-23.
    """
    rng = rng or random.Random()
    return NewVitalSample(
        user_id=user_id,
        heart_rate=rng.randint(60, 79),
        spo2=rng.randint(95, 99),
        systolic_bp=rng.randint(110, 129),
        diastolic_bp=rng.randint(70, 84),
        temperature=round(rng.uniform(36.5, 38.0), 1),
        respiratory_rate=rng.randint(16, 23),
    )
