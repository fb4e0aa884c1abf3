"""
HEALTH MONITOR - Report Generation Client
=========================================
Groq chat completions for the AI health report.
"""

import time
import logging
from dataclasses import dataclass
from typing import Optional

from groq import Groq

from healthmonitor.errors import ServiceUnavailable

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "llama-3.3-70b-versatile"


@dataclass(frozen=True)
class LLMResponse:
    content: str
    model: str
    total_tokens: int = 0


class LLMWrapper:
    """
    Groq chat-completion client for health report generation.

    Calls are bounded by `timeout` seconds and never retried.
    """
    def __init__(self, api_key: Optional[str] = None, model: str = DEFAULT_MODEL,
                 timeout: float = 60.0):
        self.model = model or DEFAULT_MODEL
        self.timeout = timeout
        self.client = None
        if api_key:
            self.client = Groq(api_key=api_key, timeout=timeout, max_retries=0)
            logger.info("Groq client initialized")
        else:
            logger.warning("GROQ_API_KEY not set. AI analysis is disabled.")

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def generate(self, prompt: str, system_prompt: str = "You are a helpful AI assistant.") -> LLMResponse:
        if not self.is_configured:
            raise ServiceUnavailable("AI Analysis service is not configured. Please contact your administrator.")

        started = time.monotonic()
        try:
            chat_completion = self.client.chat.completions.create(
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                model=self.model,
                temperature=0.3,
                max_tokens=2048,
            )
        except Exception as e:
            logger.error(f"Groq generation failed: {e}")
            raise ServiceUnavailable("Failed to generate AI analysis") from e

        elapsed_ms = (time.monotonic() - started) * 1000
        content = chat_completion.choices[0].message.content or ""
        tokens = chat_completion.usage.total_tokens if chat_completion.usage else 0
        logger.info(f"Generated health report with {self.model} in {elapsed_ms:.0f}ms ({tokens} tokens)")

        return LLMResponse(content=content, model=self.model, total_tokens=tokens)
