import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    # Language model (any OpenAI-compatible chat completions endpoint)
    llm_api_key: str = ""
    llm_base_url: str = "https://api.perplexity.ai"
    llm_primary_model: str = "sonar-pro"
    llm_fallback_models: Annotated[list[str], NoDecode] = ["sonar"]
    llm_attempt_timeout: float = 45.0
    llm_temperature: float = 0.3
    llm_max_tokens: int = 2048

    # PDF rendering
    render_timeout: float = 30.0
    chromium_executable_path: str = ""

    rate_limit_analyze: str = "10/minute"
    log_level: str = "INFO"
    cors_origins: Annotated[list[str], NoDecode] = ["*"]

    @field_validator("llm_fallback_models", "cors_origins", mode="before")
    @classmethod
    def parse_list(cls, v):
        if isinstance(v, str):
            # Accept JSON array or comma-separated string
            v = v.strip()
            if v.startswith("["):
                return json.loads(v)
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent / ".env"),
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def candidate_models(self) -> list[str]:
        """Primary model, then the first fallback that differs from it."""
        models = [self.llm_primary_model]
        for model in self.llm_fallback_models:
            if model not in models:
                models.append(model)
                break
        return models


@lru_cache
def get_settings() -> Settings:
    return Settings()
