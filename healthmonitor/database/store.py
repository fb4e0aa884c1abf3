"""
HEALTH MONITOR - Data Store
===========================
Persistence contract for users, patient records, vital samples and device
bindings, plus the in-process backend used for development and tests.

Listings are sorted newest first; equal timestamps keep insertion order.
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, replace
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from healthmonitor.errors import DuplicateEmail
from .entities import (
    NewUser, User, NewPatientRecord, PatientRecord,
    NewVitalSample, VitalSample, DeviceBinding,
)
from .enums import FilterPeriod

logger = logging.getLogger(__name__)


def period_bounds(period: Optional[str], now: datetime) -> Optional[Tuple[datetime, datetime]]:
    """
    Half-open `[start, end)` window for a history filter.

    `day` is the calendar date of `now`, `month` its month and year, `year`
    its year. Returns None for no period or an unrecognized one.
    """
    if period == FilterPeriod.DAY.value:
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return start, start + timedelta(days=1)
    if period == FilterPeriod.MONTH.value:
        start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        if start.month == 12:
            return start, start.replace(year=start.year + 1, month=1)
        return start, start.replace(month=start.month + 1)
    if period == FilterPeriod.YEAR.value:
        start = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        return start, start.replace(year=start.year + 1)
    return None


class DataStore(ABC):
    """
    Storage contract shared by every backend.

    Implementations must be safe to call from concurrently handled requests.
    """

    # Users
    @abstractmethod
    def create_user(self, new_user: NewUser) -> User:
        """Insert a user. Raises DuplicateEmail if the email is taken."""

    @abstractmethod
    def get_user_by_id(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    def list_users(self) -> List[User]:
        """All users in insertion order."""

    # Patient records
    @abstractmethod
    def create_patient_record(self, new_record: NewPatientRecord) -> PatientRecord:
        pass

    @abstractmethod
    def get_patient_record(self, record_id: str) -> Optional[PatientRecord]:
        pass

    @abstractmethod
    def list_records_by_user(self, user_id: str) -> List[PatientRecord]:
        pass

    @abstractmethod
    def list_all_records(self) -> List[PatientRecord]:
        pass

    # Vital samples
    @abstractmethod
    def create_vital_sample(self, new_sample: NewVitalSample) -> VitalSample:
        """Insert a sample. The store assigns `id` and `timestamp`."""

    @abstractmethod
    def get_latest_vital_sample(self, user_id: str) -> Optional[VitalSample]:
        pass

    @abstractmethod
    def list_vital_samples_by_user(self, user_id: str, period: Optional[str] = None,
                                   now: Optional[datetime] = None) -> List[VitalSample]:
        pass

    @abstractmethod
    def list_all_vital_samples(self, limit: Optional[int] = None) -> List[VitalSample]:
        pass

    # Device bindings
    @abstractmethod
    def bind_device(self, device_id: str, user_id: str) -> DeviceBinding:
        """Bind a device to a user, replacing any previous binding."""

    @abstractmethod
    def get_device_binding(self, device_id: str) -> Optional[DeviceBinding]:
        pass

    @abstractmethod
    def list_device_bindings(self) -> List[DeviceBinding]:
        pass

    def initialize(self) -> None:
        """Prepare the backend (create schema, open pools)."""

    def close(self) -> None:
        """Release backend resources."""

    def health_check(self) -> bool:
        return True


class MemoryStore(DataStore):
    """
    In-process backend over dicts guarded by a re-entrant lock.

    Dicts preserve insertion order, and Python's sort is stable, so sorting
    newest-first keeps insertion order between equal timestamps.
    """

    def __init__(self, clock=datetime.now):
        self._clock = clock
        self._lock = threading.RLock()
        self._users: Dict[str, User] = {}
        self._records: Dict[str, PatientRecord] = {}
        self._samples: Dict[str, VitalSample] = {}
        self._devices: Dict[str, DeviceBinding] = {}
        logger.info("MemoryStore initialized")

    # ------------------------------------------------------------------ users

    def create_user(self, new_user: NewUser) -> User:
        with self._lock:
            if self._find_user_by_email(new_user.email) is not None:
                raise DuplicateEmail()
            user = User(id=str(uuid.uuid4()), created_at=self._clock(), **asdict(new_user))
            self._users[user.id] = user
            return replace(user)

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            user = self._find_user_by_email(email)
            return replace(user) if user else None

    def _find_user_by_email(self, email: str) -> Optional[User]:
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    def list_users(self) -> List[User]:
        with self._lock:
            return [replace(u) for u in self._users.values()]

    # -------------------------------------------------------- patient records

    def create_patient_record(self, new_record: NewPatientRecord) -> PatientRecord:
        with self._lock:
            record = PatientRecord(
                id=str(uuid.uuid4()),
                user_id=new_record.user_id,
                record_date=new_record.record_date or self._clock(),
                notes=new_record.notes,
                diagnosis=new_record.diagnosis,
            )
            self._records[record.id] = record
            return replace(record)

    def get_patient_record(self, record_id: str) -> Optional[PatientRecord]:
        with self._lock:
            record = self._records.get(record_id)
            return replace(record) if record else None

    def list_records_by_user(self, user_id: str) -> List[PatientRecord]:
        with self._lock:
            records = [replace(r) for r in self._records.values() if r.user_id == user_id]
        return sorted(records, key=lambda r: r.record_date, reverse=True)

    def list_all_records(self) -> List[PatientRecord]:
        with self._lock:
            records = [replace(r) for r in self._records.values()]
        return sorted(records, key=lambda r: r.record_date, reverse=True)

    # ----------------------------------------------------------- vital samples

    def create_vital_sample(self, new_sample: NewVitalSample) -> VitalSample:
        with self._lock:
            sample = VitalSample(id=str(uuid.uuid4()), timestamp=self._clock(), **asdict(new_sample))
            self._samples[sample.id] = sample
            return replace(sample)

    def _samples_for(self, user_id: str) -> List[VitalSample]:
        with self._lock:
            samples = [replace(s) for s in self._samples.values() if s.user_id == user_id]
        return sorted(samples, key=lambda s: s.timestamp, reverse=True)

    def get_latest_vital_sample(self, user_id: str) -> Optional[VitalSample]:
        samples = self._samples_for(user_id)
        return samples[0] if samples else None

    def list_vital_samples_by_user(self, user_id: str, period: Optional[str] = None,
                                   now: Optional[datetime] = None) -> List[VitalSample]:
        samples = self._samples_for(user_id)
        bounds = period_bounds(period, now or self._clock())
        if bounds is None:
            return samples
        start, end = bounds
        return [s for s in samples if start <= s.timestamp < end]

    def list_all_vital_samples(self, limit: Optional[int] = None) -> List[VitalSample]:
        with self._lock:
            samples = [replace(s) for s in self._samples.values()]
        samples.sort(key=lambda s: s.timestamp, reverse=True)
        return samples[:limit] if limit is not None else samples

    # ---------------------------------------------------------------- devices

    def bind_device(self, device_id: str, user_id: str) -> DeviceBinding:
        with self._lock:
            binding = DeviceBinding(device_id=device_id, user_id=user_id, registered_at=self._clock())
            self._devices.pop(device_id, None)
            self._devices[device_id] = binding
            return replace(binding)

    def get_device_binding(self, device_id: str) -> Optional[DeviceBinding]:
        with self._lock:
            binding = self._devices.get(device_id)
            return replace(binding) if binding else None

    def list_device_bindings(self) -> List[DeviceBinding]:
        with self._lock:
            return [replace(b) for b in self._devices.values()]
