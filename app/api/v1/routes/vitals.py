"""
Device Vitals Routes
====================
Public ingestion endpoint for bedside devices and the dashboard's
latest-reading feed.
"""
import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool

from healthmonitor.auth import TokenIdentity
from healthmonitor.database import DataStore
from healthmonitor.errors import NotFound, ValidationError
from healthmonitor.vitals import TemperatureReading, ingest_reading, parse_device_payload

from app.core.security import get_current_user
from app.models.schemas import DeviceIngestResponse, VitalSampleResponse
from app.services.database import get_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=DeviceIngestResponse, status_code=status.HTTP_201_CREATED)
async def ingest_device_data(request: Request, store: DataStore = Depends(get_store)):
    """
    Store a reading from a device. No authentication.

    The body is validated by `data_type`; firmware field aliases are
    accepted. The reading is merged with the target user's latest sample
    and appended as a new sample.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON")

    reading = parse_device_payload(payload)
    result = await run_in_threadpool(ingest_reading, store, reading)

    data = {
        "id": result.sample.id,
        "data_type": reading.data_type,
        "device_id": reading.device_id,
    }
    if isinstance(reading, TemperatureReading):
        data["temperature"] = reading.temperature
    else:
        if reading.spo2 is not None:
            data["spo2"] = reading.spo2
        if reading.heart_rate is not None:
            data["heart_rate"] = int(reading.heart_rate)

    return DeviceIngestResponse(
        success=True,
        message=f"Successfully stored {reading.data_type} data",
        data=data,
    )


@router.get("/latest", response_model=VitalSampleResponse, response_model_by_alias=True)
def get_latest_vitals(
    current_user: TokenIdentity = Depends(get_current_user),
    store: DataStore = Depends(get_store),
):
    """
    Newest sample system-wide.

    A non-admin caller who does not own that sample gets their own latest
    sample instead.
    """
    newest = store.list_all_vital_samples(limit=1)
    if not newest:
        raise NotFound("No ECG data found")

    sample = newest[0]
    if not current_user.is_admin and sample.user_id != current_user.user_id:
        sample = store.get_latest_vital_sample(current_user.user_id)
        if sample is None:
            raise NotFound("No ECG data found")

    return VitalSampleResponse.model_validate(sample)
