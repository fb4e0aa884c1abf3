"""
HEALTH MONITOR - Device Readings
================================
Payloads posted by bedside devices (ESP32 firmware), validated into a
tagged variant keyed on `data_type`.
"""

from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic import ValidationError as PydanticValidationError

from healthmonitor.errors import ValidationError

READING_TYPES = ("temperature", "vitals")


def _first_present(data: Dict[str, Any], *names: str) -> Any:
    for name in names:
        if data.get(name) is not None:
            return data[name]
    return None


class TemperatureReading(BaseModel):
    """Body temperature. Firmware may send `temperature` or `temperature_c`."""
    model_config = ConfigDict(allow_inf_nan=False)

    data_type: Literal["temperature"]
    device_id: str
    temperature: float

    @model_validator(mode="before")
    @classmethod
    def _accept_firmware_names(cls, data: Any) -> Any:
        if isinstance(data, dict):
            value = _first_present(data, "temperature", "temperature_c")
            if value is None:
                raise ValueError("Missing temperature field for temperature data_type")
            data = {**data, "temperature": value}
        return data


class VitalsReading(BaseModel):
    """
    Pulse oximeter reading. Either value may be absent, not both.

    Firmware names `max_spo2_percent` / `max_heart_rate_bpm` are accepted
    when the standard names are absent.
    """
    model_config = ConfigDict(allow_inf_nan=False)

    data_type: Literal["vitals"]
    device_id: str
    spo2: Optional[float] = None
    heart_rate: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_firmware_names(cls, data: Any) -> Any:
        if isinstance(data, dict):
            spo2 = _first_present(data, "spo2", "max_spo2_percent")
            heart_rate = _first_present(data, "heart_rate", "max_heart_rate_bpm")
            if spo2 is None and heart_rate is None:
                raise ValueError("Missing spo2 or heart_rate field for vitals data_type")
            data = {**data, "spo2": spo2, "heart_rate": heart_rate}
        return data


DeviceReading = Annotated[Union[TemperatureReading, VitalsReading], Field(discriminator="data_type")]

_reading_adapter = TypeAdapter(DeviceReading)


def parse_device_payload(payload: Any) -> Union[TemperatureReading, VitalsReading]:
    """
    Validate a raw device payload.

    Raises:
        ValidationError: missing device_id/data_type, unknown data_type,
            or missing/invalid type-specific fields.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    if not payload.get("device_id") or not payload.get("data_type"):
        raise ValidationError("Missing required fields: device_id and data_type")

    data_type = payload["data_type"]
    if data_type not in READING_TYPES:
        raise ValidationError(f"Invalid data_type: {data_type}. Expected 'temperature' or 'vitals'")

    payload = {**payload, "device_id": str(payload["device_id"])}
    try:
        return _reading_adapter.validate_python(payload)
    except PydanticValidationError as e:
        error = e.errors()[0]
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        else:
            field = ".".join(str(part) for part in error["loc"][1:])
            message = f"{field}: {message}" if field else message
        raise ValidationError(message)
