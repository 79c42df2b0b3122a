from __future__ import annotations

import os

from dotenv import load_dotenv
from openai import OpenAI
from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://api.siliconflow.cn/v1"
DEFAULT_MODEL = "deepseek-ai/DeepSeek-R1-Distill-Qwen-7B"


class ConfigError(ValueError):
    pass


class SamplingParams(BaseModel):
    temperature: float = 0.7
    top_p: float = 0.7
    top_k: int = 50
    frequency_penalty: float = 0.5
    n: int = 1


class Settings(BaseModel):
    api_key: str = Field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    timeout: float = 60.0
    log_level: str = "INFO"
    max_tokens: int = 1024
    stream_max_tokens: int = 4096
    sampling: SamplingParams = Field(default_factory=SamplingParams)


def load_settings(env_file: str = ".env") -> Settings:
    load_dotenv(env_file)
    api_key = os.getenv("BIGDECISION_API_KEY")
    if not api_key:
        raise ConfigError("BIGDECISION_API_KEY missing in environment or .env")
    try:
        timeout = float(os.getenv("BIGDECISION_TIMEOUT", "60"))
    except ValueError as exc:
        raise ConfigError("BIGDECISION_TIMEOUT must be a number of seconds") from exc
    return Settings(
        api_key=api_key,
        base_url=os.getenv("BIGDECISION_BASE_URL", DEFAULT_BASE_URL),
        model=os.getenv("BIGDECISION_MODEL", DEFAULT_MODEL),
        timeout=timeout,
        log_level=os.getenv("BIGDECISION_LOG_LEVEL", "INFO").upper(),
    )


def build_openai_client(settings: Settings) -> OpenAI:
    # Retries are the caller's decision, never the transport's.
    return OpenAI(
        api_key=settings.api_key,
        base_url=settings.base_url,
        timeout=settings.timeout,
        max_retries=0,
    )
