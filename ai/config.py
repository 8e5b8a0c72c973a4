"""
Service Configuration
=====================

Settings for the EduNex AI proxy, read once from the environment and
injected into route handlers via FastAPI dependencies.

Environment:
- GROQ_API_KEY / GEMINI_API_KEY: server-side provider credentials
- GROQ_BASE_URL / GEMINI_BASE_URL: upstream API roots
- AI_REQUEST_TIMEOUT: per upstream call timeout (seconds)
- AI_REQUEST_DEADLINE: deadline for a whole inbound request (seconds)
- CORS_ORIGINS: comma separated list of allowed origins
- LOG_LEVEL: logging level name
"""

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel


DEFAULT_GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"


def _credential(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    if not value or value == "placeholder":
        return None
    return value


class Settings(BaseModel):
    """Runtime configuration for the proxy"""
    groq_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    groq_base_url: str = DEFAULT_GROQ_BASE_URL
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL
    request_timeout: float = 30.0
    request_deadline: float = 90.0
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            groq_api_key=_credential("GROQ_API_KEY"),
            gemini_api_key=_credential("GEMINI_API_KEY"),
            groq_base_url=os.getenv("GROQ_BASE_URL", DEFAULT_GROQ_BASE_URL).rstrip("/"),
            gemini_base_url=os.getenv("GEMINI_BASE_URL", DEFAULT_GEMINI_BASE_URL).rstrip("/"),
            request_timeout=float(os.getenv("AI_REQUEST_TIMEOUT", "30")),
            request_deadline=float(os.getenv("AI_REQUEST_DEADLINE", "90")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache()
def get_settings() -> Settings:
    """FastAPI dependency returning the process settings"""
    return Settings.from_env()
