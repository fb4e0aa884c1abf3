"""
HEALTH MONITOR - Data Repositories
==================================
Relational DataStore backend: one repository per table, composed into
SQLStore. Each store call runs in its own session/transaction.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from healthmonitor.auth.models import Role
from healthmonitor.errors import DuplicateEmail
from .connection import DatabaseManager
from .entities import (
    NewUser, User, NewPatientRecord, PatientRecord,
    NewVitalSample, VitalSample, DeviceBinding, WAVEFORM_FIELDS,
)
from .models import UserRow, PatientRecordRow, VitalSampleRow, DeviceBindingRow
from .store import DataStore, period_bounds

logger = logging.getLogger(__name__)


class BaseRepository:
    """Base repository bound to a single session."""

    def __init__(self, session: Session):
        self.session = session


class UserRepository(BaseRepository):
    """Repository for User operations."""

    @staticmethod
    def to_entity(row: UserRow) -> User:
        return User(
            id=row.id,
            email=row.email,
            phone=row.phone,
            password_hash=row.password_hash,
            blood_group=row.blood_group,
            custom_blood_group=row.custom_blood_group,
            gender=row.gender,
            role=Role(row.role),
            created_at=row.created_at,
        )

    def create(self, new_user: NewUser, created_at: datetime) -> User:
        row = UserRow(
            email=new_user.email,
            phone=new_user.phone,
            password_hash=new_user.password_hash,
            blood_group=new_user.blood_group,
            custom_blood_group=new_user.custom_blood_group,
            gender=new_user.gender,
            role=Role(new_user.role).value,
            created_at=created_at,
        )
        self.session.add(row)
        self.session.flush()
        return self.to_entity(row)

    def get_by_id(self, user_id: str) -> Optional[User]:
        row = self.session.scalars(select(UserRow).where(UserRow.id == user_id)).first()
        return self.to_entity(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        row = self.session.scalars(select(UserRow).where(UserRow.email == email)).first()
        return self.to_entity(row) if row else None

    def get_all(self) -> List[User]:
        rows = self.session.scalars(select(UserRow).order_by(UserRow.seq)).all()
        return [self.to_entity(r) for r in rows]


class PatientRecordRepository(BaseRepository):
    """Repository for PatientRecord operations."""

    @staticmethod
    def to_entity(row: PatientRecordRow) -> PatientRecord:
        return PatientRecord(
            id=row.id,
            user_id=row.user_id,
            record_date=row.record_date,
            notes=row.notes,
            diagnosis=row.diagnosis,
        )

    def create(self, new_record: NewPatientRecord, now: datetime) -> PatientRecord:
        row = PatientRecordRow(
            user_id=new_record.user_id,
            record_date=new_record.record_date or now,
            notes=new_record.notes,
            diagnosis=new_record.diagnosis,
        )
        self.session.add(row)
        self.session.flush()
        return self.to_entity(row)

    def get_by_id(self, record_id: str) -> Optional[PatientRecord]:
        row = self.session.scalars(select(PatientRecordRow).where(PatientRecordRow.id == record_id)).first()
        return self.to_entity(row) if row else None

    def get_by_user(self, user_id: str) -> List[PatientRecord]:
        stmt = (
            select(PatientRecordRow)
            .where(PatientRecordRow.user_id == user_id)
            .order_by(PatientRecordRow.record_date.desc(), PatientRecordRow.seq)
        )
        return [self.to_entity(r) for r in self.session.scalars(stmt).all()]

    def get_all(self) -> List[PatientRecord]:
        stmt = select(PatientRecordRow).order_by(PatientRecordRow.record_date.desc(), PatientRecordRow.seq)
        return [self.to_entity(r) for r in self.session.scalars(stmt).all()]


class VitalSampleRepository(BaseRepository):
    """Repository for VitalSample operations."""

    @staticmethod
    def to_entity(row: VitalSampleRow) -> VitalSample:
        return VitalSample(
            id=row.id,
            user_id=row.user_id,
            record_id=row.record_id,
            timestamp=row.timestamp,
            heart_rate=row.heart_rate,
            spo2=row.spo2,
            systolic_bp=row.systolic_bp,
            diastolic_bp=row.diastolic_bp,
            temperature=row.temperature,
            respiratory_rate=row.respiratory_rate,
            **{name: getattr(row, name) for name in WAVEFORM_FIELDS},
        )

    def create(self, new_sample: NewVitalSample, timestamp: datetime) -> VitalSample:
        row = VitalSampleRow(
            user_id=new_sample.user_id,
            record_id=new_sample.record_id,
            timestamp=timestamp,
            heart_rate=new_sample.heart_rate,
            spo2=new_sample.spo2,
            systolic_bp=new_sample.systolic_bp,
            diastolic_bp=new_sample.diastolic_bp,
            temperature=new_sample.temperature,
            respiratory_rate=new_sample.respiratory_rate,
            **{name: getattr(new_sample, name) for name in WAVEFORM_FIELDS},
        )
        self.session.add(row)
        self.session.flush()
        return self.to_entity(row)

    def _newest_first(self, stmt):
        return stmt.order_by(VitalSampleRow.timestamp.desc(), VitalSampleRow.seq)

    def get_latest_by_user(self, user_id: str) -> Optional[VitalSample]:
        stmt = self._newest_first(select(VitalSampleRow).where(VitalSampleRow.user_id == user_id)).limit(1)
        row = self.session.scalars(stmt).first()
        return self.to_entity(row) if row else None

    def get_by_user(self, user_id: str, start: Optional[datetime] = None,
                    end: Optional[datetime] = None) -> List[VitalSample]:
        stmt = select(VitalSampleRow).where(VitalSampleRow.user_id == user_id)
        if start is not None:
            stmt = stmt.where(VitalSampleRow.timestamp >= start, VitalSampleRow.timestamp < end)
        return [self.to_entity(r) for r in self.session.scalars(self._newest_first(stmt)).all()]

    def get_all(self, limit: Optional[int] = None) -> List[VitalSample]:
        stmt = self._newest_first(select(VitalSampleRow))
        if limit is not None:
            stmt = stmt.limit(limit)
        return [self.to_entity(r) for r in self.session.scalars(stmt).all()]


class DeviceBindingRepository(BaseRepository):
    """Repository for DeviceBinding operations."""

    @staticmethod
    def to_entity(row: DeviceBindingRow) -> DeviceBinding:
        return DeviceBinding(device_id=row.device_id, user_id=row.user_id, registered_at=row.registered_at)

    def upsert(self, device_id: str, user_id: str, now: datetime) -> DeviceBinding:
        row = self.session.get(DeviceBindingRow, device_id)
        if row is None:
            row = DeviceBindingRow(device_id=device_id)
            self.session.add(row)
        row.user_id = user_id
        row.registered_at = now
        self.session.flush()
        return self.to_entity(row)

    def get(self, device_id: str) -> Optional[DeviceBinding]:
        row = self.session.get(DeviceBindingRow, device_id)
        return self.to_entity(row) if row else None

    def get_all(self) -> List[DeviceBinding]:
        rows = self.session.scalars(select(DeviceBindingRow).order_by(DeviceBindingRow.registered_at)).all()
        return [self.to_entity(r) for r in rows]


class SQLStore(DataStore):
    """
    DataStore backed by SQLAlchemy.

    Email uniqueness is enforced by the `users.email` unique constraint, so
    concurrent registrations with the same email cannot both succeed.
    """

    def __init__(self, db_manager: Optional[DatabaseManager] = None, clock=datetime.now):
        self.db = db_manager or DatabaseManager()
        self._clock = clock

    def initialize(self) -> None:
        self.db.create_tables()

    def close(self) -> None:
        self.db.close()

    def health_check(self) -> bool:
        return self.db.health_check()

    # Users

    def create_user(self, new_user: NewUser) -> User:
        try:
            with self.db.session() as session:
                return UserRepository(session).create(new_user, self._clock())
        except IntegrityError:
            logger.warning("Rejected duplicate email at the database constraint")
            raise DuplicateEmail()

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        with self.db.session() as session:
            return UserRepository(session).get_by_id(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self.db.session() as session:
            return UserRepository(session).get_by_email(email)

    def list_users(self) -> List[User]:
        with self.db.session() as session:
            return UserRepository(session).get_all()

    # Patient records

    def create_patient_record(self, new_record: NewPatientRecord) -> PatientRecord:
        with self.db.session() as session:
            return PatientRecordRepository(session).create(new_record, self._clock())

    def get_patient_record(self, record_id: str) -> Optional[PatientRecord]:
        with self.db.session() as session:
            return PatientRecordRepository(session).get_by_id(record_id)

    def list_records_by_user(self, user_id: str) -> List[PatientRecord]:
        with self.db.session() as session:
            return PatientRecordRepository(session).get_by_user(user_id)

    def list_all_records(self) -> List[PatientRecord]:
        with self.db.session() as session:
            return PatientRecordRepository(session).get_all()

    # Vital samples

    def create_vital_sample(self, new_sample: NewVitalSample) -> VitalSample:
        with self.db.session() as session:
            return VitalSampleRepository(session).create(new_sample, self._clock())

    def get_latest_vital_sample(self, user_id: str) -> Optional[VitalSample]:
        with self.db.session() as session:
            return VitalSampleRepository(session).get_latest_by_user(user_id)

    def list_vital_samples_by_user(self, user_id: str, period: Optional[str] = None,
                                   now: Optional[datetime] = None) -> List[VitalSample]:
        bounds = period_bounds(period, now or self._clock())
        start, end = bounds if bounds else (None, None)
        with self.db.session() as session:
            return VitalSampleRepository(session).get_by_user(user_id, start, end)

    def list_all_vital_samples(self, limit: Optional[int] = None) -> List[VitalSample]:
        with self.db.session() as session:
            return VitalSampleRepository(session).get_all(limit)

    # Device bindings

    def bind_device(self, device_id: str, user_id: str) -> DeviceBinding:
        with self.db.session() as session:
            return DeviceBindingRepository(session).upsert(device_id, user_id, self._clock())

    def get_device_binding(self, device_id: str) -> Optional[DeviceBinding]:
        with self.db.session() as session:
            return DeviceBindingRepository(session).get(device_id)

    def list_device_bindings(self) -> List[DeviceBinding]:
        with self.db.session() as session:
            return DeviceBindingRepository(session).get_all()
