"""
HEALTH MONITOR - Database Models
================================
SQLAlchemy ORM models for the relational store.

Models:
- UserRow (email unique at the database level)
- PatientRecordRow
- VitalSampleRow (ECG and vital-sign snapshots)
- DeviceBindingRow (device -> user)

Every table carries an autoincrement `seq` primary key so listings can
break timestamp ties by insertion order; the public `id` is a UUID string.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, String, Float, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from healthmonitor.auth.models import Role


def _uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class UserRow(Base):
    """Registered patient or admin."""
    __tablename__ = "users"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False, default=_uuid)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(10), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    blood_group: Mapped[str] = mapped_column(String(10), nullable=False)
    custom_blood_group: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    gender: Mapped[str] = mapped_column(String(50), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=Role.PATIENT.value, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)


class PatientRecordRow(Base):
    """Clinical note/diagnosis recorded by an admin for a user."""
    __tablename__ = "patient_records"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    record_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    diagnosis: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class VitalSampleRow(Base):
    """One timestamped vital-sign snapshot with optional waveform payloads."""
    __tablename__ = "ecg_data"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    record_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("patient_records.id"), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)

    # Vital signs
    heart_rate: Mapped[int] = mapped_column(Integer, nullable=False)
    spo2: Mapped[int] = mapped_column(Integer, nullable=False)
    systolic_bp: Mapped[int] = mapped_column(Integer, nullable=False)
    diastolic_bp: Mapped[int] = mapped_column(Integer, nullable=False)
    temperature: Mapped[float] = mapped_column(Float, nullable=False)
    respiratory_rate: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Waveforms (serialized numeric arrays, opaque to the store)
    pleth_waveform: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    spo2_waveform: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resp_waveform: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cvp_art_waveform: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ecg_oxp_waveform: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    etco2_waveform: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_ecg_data_user_timestamp", "user_id", "timestamp"),
    )


class DeviceBindingRow(Base):
    """Binding of an ingesting device to the user it reports for."""
    __tablename__ = "device_bindings"

    device_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    registered_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
