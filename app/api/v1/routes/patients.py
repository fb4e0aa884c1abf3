"""
Patient Record Routes
=====================
Clinical notes and diagnoses attached to a user. Admins write, owners read.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from healthmonitor.auth import TokenIdentity
from healthmonitor.database import DataStore, NewPatientRecord
from healthmonitor.errors import ValidationError

from app.core.security import require_admin, require_self_or_admin
from app.models.schemas import PatientRecordCreateRequest, PatientRecordResponse
from app.services.database import get_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{user_id}/records", response_model=List[PatientRecordResponse], response_model_by_alias=True)
def list_records(
    user_id: str,
    current_user: TokenIdentity = Depends(require_self_or_admin),
    store: DataStore = Depends(get_store),
):
    """Records for one user, newest first."""
    records = store.list_records_by_user(user_id)
    return [PatientRecordResponse.model_validate(r) for r in records]


@router.post("/{user_id}/records", response_model=PatientRecordResponse,
             status_code=status.HTTP_201_CREATED, response_model_by_alias=True)
def create_record(
    user_id: str,
    request: PatientRecordCreateRequest,
    current_user: TokenIdentity = Depends(require_admin),
    store: DataStore = Depends(get_store),
):
    if store.get_user_by_id(user_id) is None:
        raise ValidationError("User not found")

    record = store.create_patient_record(NewPatientRecord(
        user_id=user_id,
        notes=request.notes,
        diagnosis=request.diagnosis,
        record_date=request.record_date,
    ))
    logger.info(f"Admin {current_user.user_id} created record {record.id} for user {user_id}")
    return PatientRecordResponse.model_validate(record)
