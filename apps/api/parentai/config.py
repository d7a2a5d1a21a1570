"""Application configuration utilities."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


class AppConfig(BaseModel):
    """Strongly typed configuration loaded from config.json and the environment."""

    llm_api_key: Optional[str] = Field(default=None)
    llm_model: str = Field(default="llama-3.1-70b-versatile")
    llm_base_url: str = Field(default="https://api.groq.com/openai/v1")
    llm_temperature: float = Field(default=0.7)
    llm_max_tokens: int = Field(default=500)
    cors_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    @property
    def has_llm_credentials(self) -> bool:
        return bool(self.llm_api_key and self.llm_api_key.strip())


def _config_path() -> Path:
    return Path(__file__).resolve().parents[1] / "config.json"


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    api_key = os.getenv("GROQ_API_KEY")
    if api_key:
        overrides["llm_api_key"] = api_key
    model = os.getenv("PARENTAI_LLM_MODEL")
    if model:
        overrides["llm_model"] = model
    base_url = os.getenv("PARENTAI_LLM_BASE_URL")
    if base_url:
        overrides["llm_base_url"] = base_url
    return overrides


def load_config() -> AppConfig:
    """Load configuration from config.json (optional), then apply env overrides.

    A missing file is fine: the chat proxy reports the absent credential to
    callers so they can switch to canned responses.
    """

    contents: Dict[str, Any] = {}
    config_file = _config_path()
    if config_file.exists():
        contents = json.loads(config_file.read_text())
    contents.update(_env_overrides())
    return AppConfig(**contents)


CONFIG = load_config()
