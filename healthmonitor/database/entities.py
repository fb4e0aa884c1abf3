"""
HEALTH MONITOR - Domain Entities
================================
Plain records returned by every DataStore backend.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from healthmonitor.auth.models import Role


WAVEFORM_FIELDS = (
    "pleth_waveform",
    "spo2_waveform",
    "resp_waveform",
    "cvp_art_waveform",
    "ecg_oxp_waveform",
    "etco2_waveform",
)


@dataclass
class NewUser:
    email: str
    phone: str
    password_hash: str
    blood_group: str
    gender: str
    role: Role = Role.PATIENT
    custom_blood_group: Optional[str] = None


@dataclass
class User:
    """Registered user. `password_hash` never leaves the API layer."""
    id: str
    email: str
    phone: str
    password_hash: str
    blood_group: str
    gender: str
    role: Role
    custom_blood_group: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class NewPatientRecord:
    user_id: str
    notes: Optional[str] = None
    diagnosis: Optional[str] = None
    record_date: Optional[datetime] = None


@dataclass
class PatientRecord:
    id: str
    user_id: str
    record_date: datetime
    notes: Optional[str] = None
    diagnosis: Optional[str] = None


@dataclass
class NewVitalSample:
    """Sample fields supplied by a caller. `id` and `timestamp` are server-assigned."""
    user_id: str
    heart_rate: int
    spo2: int
    systolic_bp: int
    diastolic_bp: int
    temperature: float
    respiratory_rate: Optional[int] = None
    record_id: Optional[str] = None
    pleth_waveform: Optional[str] = None
    spo2_waveform: Optional[str] = None
    resp_waveform: Optional[str] = None
    cvp_art_waveform: Optional[str] = None
    ecg_oxp_waveform: Optional[str] = None
    etco2_waveform: Optional[str] = None


@dataclass
class VitalSample:
    id: str
    user_id: str
    timestamp: datetime
    heart_rate: int
    spo2: int
    systolic_bp: int
    diastolic_bp: int
    temperature: float
    respiratory_rate: Optional[int] = None
    record_id: Optional[str] = None
    pleth_waveform: Optional[str] = None
    spo2_waveform: Optional[str] = None
    resp_waveform: Optional[str] = None
    cvp_art_waveform: Optional[str] = None
    ecg_oxp_waveform: Optional[str] = None
    etco2_waveform: Optional[str] = None


@dataclass
class DeviceBinding:
    """Which user an ingesting device reports for."""
    device_id: str
    user_id: str
    registered_at: datetime = field(default_factory=datetime.now)
