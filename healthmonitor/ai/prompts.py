"""
HEALTH MONITOR - Health Report Prompt
=====================================
Jinja2 rendering of the fixed health-report prompt sent to the text
generation service.
"""

import logging
from pathlib import Path
from typing import Dict, Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from healthmonitor.database import User, VitalSample

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
HEALTH_REPORT_TEMPLATE = "health_report.md.j2"
NOT_AVAILABLE = "Not available"

SYSTEM_PROMPT = (
    "You are a careful clinical assistant. You never invent measurements "
    "that are not present in the data you are given."
)

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


def build_sensor_data(sample: VitalSample, user: User) -> Dict[str, Any]:
    """Formatted vitals and patient context for the prompt and the API response."""
    has_bp = sample.systolic_bp and sample.diastolic_bp
    return {
        "timestamp": sample.timestamp,
        "vitalSigns": {
            "heartRate": f"{sample.heart_rate} BPM" if sample.heart_rate else NOT_AVAILABLE,
            "spo2": f"{sample.spo2}%" if sample.spo2 else NOT_AVAILABLE,
            "bloodPressure": f"{sample.systolic_bp}/{sample.diastolic_bp} mmHg" if has_bp else NOT_AVAILABLE,
            "temperature": f"{sample.temperature:.1f}°C" if sample.temperature else NOT_AVAILABLE,
            "respiratoryRate": (
                f"{sample.respiratory_rate} breaths/min" if sample.respiratory_rate else NOT_AVAILABLE
            ),
        },
        "patientInfo": {
            "email": user.email or "Patient",
            "gender": user.gender or "Not specified",
            "bloodGroup": user.custom_blood_group or user.blood_group or "Not specified",
        },
    }


def render_health_report_prompt(sensor_data: Dict[str, Any]) -> str:
    """Render the health report prompt for one set of sensor data."""
    vitals = sensor_data["vitalSigns"]
    sections = [
        {"title": "Heart Rate", "value": vitals["heartRate"], "scale": "Normal/Elevated/Low"},
        {"title": "Oxygen Saturation (SpO2)", "value": vitals["spo2"], "scale": "Normal/Low/Excellent"},
        {"title": "Blood Pressure", "value": vitals["bloodPressure"], "scale": "Normal/High/Low"},
        {"title": "Body Temperature", "value": vitals["temperature"], "scale": "Normal/Fever/Hypothermia"},
        {"title": "Respiratory Rate", "value": vitals["respiratoryRate"], "scale": "Normal/Elevated/Low"},
    ]
    template = _env.get_template(HEALTH_REPORT_TEMPLATE)
    return template.render(
        patient=sensor_data["patientInfo"],
        vitals=vitals,
        recorded_at=sensor_data["timestamp"].strftime("%Y-%m-%d %H:%M:%S"),
        sections=sections,
        not_available=NOT_AVAILABLE,
    )
