"""
HEALTH MONITOR - AI Report Module
=================================
Prompt rendering and the text-generation client for health summaries.
"""

from .llm_wrapper import LLMWrapper, LLMResponse
from .prompts import SYSTEM_PROMPT, NOT_AVAILABLE, build_sensor_data, render_health_report_prompt

__all__ = [
    'LLMWrapper',
    'LLMResponse',
    'SYSTEM_PROMPT',
    'NOT_AVAILABLE',
    'build_sensor_data',
    'render_health_report_prompt',
]
