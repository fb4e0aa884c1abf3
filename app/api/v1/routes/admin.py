"""
Admin Routes
============
System-wide listings and device registration. Admin role required.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from healthmonitor.auth import TokenIdentity
from healthmonitor.database import DataStore
from healthmonitor.errors import ValidationError

from app.core.security import require_admin
from app.models.schemas import (
    DeviceBindingResponse, DeviceBindRequest, PatientRecordResponse,
    UserResponse, VitalSampleResponse,
)
from app.services.database import get_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/users", response_model=List[UserResponse], response_model_by_alias=True)
def list_users(
    current_user: TokenIdentity = Depends(require_admin),
    store: DataStore = Depends(get_store),
):
    return [UserResponse.model_validate(u) for u in store.list_users()]


@router.get("/ecg-data", response_model=List[VitalSampleResponse], response_model_by_alias=True)
def list_samples(
    current_user: TokenIdentity = Depends(require_admin),
    store: DataStore = Depends(get_store),
):
    return [VitalSampleResponse.model_validate(s) for s in store.list_all_vital_samples()]


@router.get("/records", response_model=List[PatientRecordResponse], response_model_by_alias=True)
def list_records(
    current_user: TokenIdentity = Depends(require_admin),
    store: DataStore = Depends(get_store),
):
    return [PatientRecordResponse.model_validate(r) for r in store.list_all_records()]


@router.post("/devices", response_model=DeviceBindingResponse, status_code=status.HTTP_201_CREATED,
             response_model_by_alias=True)
def bind_device(
    request: DeviceBindRequest,
    current_user: TokenIdentity = Depends(require_admin),
    store: DataStore = Depends(get_store),
):
    """Attribute all future readings from `deviceId` to `userId`. Rebinding replaces."""
    if store.get_user_by_id(request.user_id) is None:
        raise ValidationError("User not found")

    binding = store.bind_device(request.device_id, request.user_id)
    logger.info(f"Admin {current_user.user_id} bound device {binding.device_id} to user {binding.user_id}")
    return DeviceBindingResponse.model_validate(binding)


@router.get("/devices", response_model=List[DeviceBindingResponse], response_model_by_alias=True)
def list_devices(
    current_user: TokenIdentity = Depends(require_admin),
    store: DataStore = Depends(get_store),
):
    return [DeviceBindingResponse.model_validate(b) for b in store.list_device_bindings()]
