"""
Pydantic Models/Schemas for API
================================
Request and response models for the Health Monitor API.

JSON field names are camelCase (the frontend contract); Python attributes
stay snake_case and responses are serialized by alias.
"""

import re
from datetime import datetime
from typing import Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from healthmonitor.auth import PasswordPolicy, Role
from healthmonitor.database import BloodGroup


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# AUTH SCHEMAS
# =============================================================================

class RegisterRequest(CamelModel):
    email: EmailStr
    phone: str
    password: str
    blood_group: BloodGroup
    custom_blood_group: Optional[str] = None
    gender: str
    role: Role = Role.PATIENT

    @field_validator("phone", mode="before")
    @classmethod
    def _phone_digits(cls, value: Any) -> Any:
        if not isinstance(value, str) or not re.fullmatch(r"\d{10}", value):
            raise ValueError("Phone number must be 10 digits")
        return value

    @field_validator("password")
    @classmethod
    def _password_policy(cls, value: str) -> str:
        is_valid, violations = PasswordPolicy.validate(value)
        if not is_valid:
            raise ValueError(violations[0])
        return value

    @field_validator("gender")
    @classmethod
    def _gender_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Gender is required")
        return value

    @model_validator(mode="after")
    def _custom_blood_group(self) -> "RegisterRequest":
        if self.blood_group == BloodGroup.OTHERS:
            if not self.custom_blood_group or not self.custom_blood_group.strip():
                raise ValueError("Custom blood group is required when blood group is Others")
        return self


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: Role = Role.PATIENT


class UserResponse(CamelModel):
    """User as returned by the API. Never carries the password hash."""
    id: str
    email: str
    phone: str
    blood_group: str
    custom_blood_group: Optional[str] = None
    gender: str
    role: Role
    created_at: Optional[datetime] = None


class LoginResponse(CamelModel):
    token: str
    user_id: str
    role: Role
    user: UserResponse


# =============================================================================
# PATIENT RECORD SCHEMAS
# =============================================================================

class PatientRecordCreateRequest(CamelModel):
    notes: Optional[str] = None
    diagnosis: Optional[str] = None
    record_date: Optional[datetime] = None


class PatientRecordResponse(CamelModel):
    id: str
    user_id: str
    record_date: datetime
    notes: Optional[str] = None
    diagnosis: Optional[str] = None


# =============================================================================
# VITAL SAMPLE SCHEMAS
# =============================================================================

class VitalSampleFields(CamelModel):
    model_config = ConfigDict(allow_inf_nan=False)

    heart_rate: int
    spo2: int
    systolic_bp: int = Field(..., alias="systolicBP")
    diastolic_bp: int = Field(..., alias="diastolicBP")
    temperature: float
    respiratory_rate: Optional[int] = None
    record_id: Optional[str] = None
    pleth_waveform: Optional[str] = None
    spo2_waveform: Optional[str] = None
    resp_waveform: Optional[str] = None
    cvp_art_waveform: Optional[str] = None
    ecg_oxp_waveform: Optional[str] = None
    etco2_waveform: Optional[str] = None


class VitalSampleCreateRequest(VitalSampleFields):
    """Manual sample submission. Client-sent `id`/`timestamp` are ignored."""
    user_id: str


class VitalSampleResponse(VitalSampleFields):
    id: str
    user_id: str
    timestamp: datetime


class DeviceIngestResponse(BaseModel):
    success: bool = True
    message: str
    data: Dict[str, Any]


# =============================================================================
# ADMIN SCHEMAS
# =============================================================================

class DeviceBindRequest(CamelModel):
    device_id: str = Field(..., min_length=1, max_length=100)
    user_id: str


class DeviceBindingResponse(CamelModel):
    device_id: str
    user_id: str
    registered_at: datetime


# =============================================================================
# AI ANALYSIS SCHEMAS
# =============================================================================

class AIAnalysisRequest(CamelModel):
    user_id: Optional[str] = None


class SensorDataSummary(CamelModel):
    timestamp: datetime
    vital_signs: Dict[str, str]


class AIAnalysisResponse(CamelModel):
    success: bool = True
    report: str
    sensor_data: SensorDataSummary
    generated_at: datetime


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================

class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    uptime: float
    environment: str


class ReadyResponse(BaseModel):
    status: str
    timestamp: datetime
    storage: Dict[str, Any]
