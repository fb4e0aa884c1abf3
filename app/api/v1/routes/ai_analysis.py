"""
AI Analysis Routes
==================
Generates a narrative health report from a user's latest vital sample.
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.concurrency import run_in_threadpool

from healthmonitor.ai import LLMWrapper, SYSTEM_PROMPT, build_sensor_data, render_health_report_prompt
from healthmonitor.auth import TokenIdentity, get_rbac_authorizer
from healthmonitor.database import DataStore
from healthmonitor.errors import NotFound, ServiceUnavailable

from app.config import Settings
from app.core.security import get_current_user
from app.core.utils import run_with_timeout
from app.models.schemas import AIAnalysisRequest, AIAnalysisResponse, SensorDataSummary
from app.services.database import get_report_generator, get_settings_dep, get_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=AIAnalysisResponse, response_model_by_alias=True)
async def generate_analysis(
    request: Optional[AIAnalysisRequest] = Body(default=None),
    current_user: TokenIdentity = Depends(get_current_user),
    store: DataStore = Depends(get_store),
    generator: LLMWrapper = Depends(get_report_generator),
    settings: Settings = Depends(get_settings_dep),
):
    """
    Health report for `userId` (defaults to the caller).

    The generated text is relayed verbatim.
    """
    target_user_id = (request.user_id if request else None) or current_user.user_id
    get_rbac_authorizer().enforce_self_or_admin(current_user, target_user_id)

    sample = await run_in_threadpool(store.get_latest_vital_sample, target_user_id)
    if sample is None:
        raise NotFound("No sensor data found. Please ensure vital signs are being monitored.")

    user = await run_in_threadpool(store.get_user_by_id, target_user_id)
    if user is None:
        raise NotFound("User not found")

    if not generator.is_configured:
        raise ServiceUnavailable("AI Analysis service is not configured. Please contact your administrator.")

    sensor_data = build_sensor_data(sample, user)
    prompt = render_health_report_prompt(sensor_data)
    response = await run_with_timeout(
        generator.generate, prompt, SYSTEM_PROMPT,
        timeout=settings.LLM_TIMEOUT_SECONDS,
        description="AI analysis",
    )
    logger.info(f"Generated health report for user {target_user_id}")

    return AIAnalysisResponse(
        success=True,
        report=response.content,
        sensor_data=SensorDataSummary(
            timestamp=sensor_data["timestamp"],
            vital_signs=sensor_data["vitalSigns"],
        ),
        generated_at=datetime.now(),
    )
