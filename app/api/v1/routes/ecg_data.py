"""
ECG Data Routes
===============
Vital sample history per user and manual sample submission.
"""
import logging
from dataclasses import fields
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from healthmonitor.auth import TokenIdentity, get_rbac_authorizer
from healthmonitor.database import DataStore, NewVitalSample
from healthmonitor.errors import NotFound, ValidationError

from app.core.security import get_current_user, require_self_or_admin
from app.models.schemas import VitalSampleCreateRequest, VitalSampleResponse
from app.services.database import get_store

logger = logging.getLogger(__name__)

router = APIRouter()

_SAMPLE_FIELDS = tuple(f.name for f in fields(NewVitalSample))


# Registered before "/{user_id}/{filter_period}" so "latest" is not read as a user id
@router.get("/latest/{user_id}", response_model=VitalSampleResponse, response_model_by_alias=True)
def get_latest_sample(
    user_id: str,
    current_user: TokenIdentity = Depends(require_self_or_admin),
    store: DataStore = Depends(get_store),
):
    sample = store.get_latest_vital_sample(user_id)
    if sample is None:
        raise NotFound("No ECG data found")
    return VitalSampleResponse.model_validate(sample)


@router.get("/{user_id}", response_model=List[VitalSampleResponse], response_model_by_alias=True)
@router.get("/{user_id}/{filter_period}", response_model=List[VitalSampleResponse],
            response_model_by_alias=True)
def list_samples(
    user_id: str,
    filter_period: Optional[str] = None,
    current_user: TokenIdentity = Depends(require_self_or_admin),
    store: DataStore = Depends(get_store),
):
    """
    Samples for one user, newest first.

    `filter_period` is day, month or year relative to now; any other value
    returns the full history.
    """
    samples = store.list_vital_samples_by_user(user_id, filter_period)
    return [VitalSampleResponse.model_validate(s) for s in samples]


@router.post("", response_model=VitalSampleResponse, status_code=status.HTTP_201_CREATED,
             response_model_by_alias=True)
def create_sample(
    request: VitalSampleCreateRequest,
    current_user: TokenIdentity = Depends(get_current_user),
    store: DataStore = Depends(get_store),
):
    """Manually submit a sample. The server assigns `id` and `timestamp`."""
    get_rbac_authorizer().enforce_self_or_admin(current_user, request.user_id)

    if store.get_user_by_id(request.user_id) is None:
        raise ValidationError("User not found")

    if request.record_id is not None:
        record = store.get_patient_record(request.record_id)
        if record is None or record.user_id != request.user_id:
            raise ValidationError("Record not found")

    values = request.model_dump(include=set(_SAMPLE_FIELDS))
    sample = store.create_vital_sample(NewVitalSample(**values))
    logger.info(f"User {current_user.user_id} submitted sample {sample.id} for {request.user_id}")
    return VitalSampleResponse.model_validate(sample)
