from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, field_validator, model_validator
from pydantic_settings import BaseSettings


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3000


DEFAULT_TTS_MODELS = {
    "deepgram": "aura-2-iris-en",
    "openai": "gpt-4o-mini-tts",
}


class TTSConfig(BaseModel):
    provider: Literal["deepgram", "openai"] = "deepgram"
    model: str = ""  # empty picks the provider default
    encoding: str = "linear16"
    sample_rate: int = 24000
    # OpenAI only
    voice: str = "nova"
    speed: float = 1.0
    instructions: str = ""

    @model_validator(mode="after")
    def default_model(self) -> TTSConfig:
        if not self.model:
            self.model = DEFAULT_TTS_MODELS[self.provider]
        return self


class TextProcessingConfig(BaseModel):
    max_chunk_size: int = 300
    chunk_delay: float = 0.1  # seconds between chunks

    @field_validator("max_chunk_size")
    @classmethod
    def positive_chunk_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_chunk_size must be positive")
        return v

    @field_validator("chunk_delay")
    @classmethod
    def non_negative_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("chunk_delay must not be negative")
        return v


class UploadConfig(BaseModel):
    max_file_size: int = 10 * 1024 * 1024


class Settings(BaseSettings):
    server: ServerConfig = ServerConfig()
    tts: TTSConfig = TTSConfig()
    text_processing: TextProcessingConfig = TextProcessingConfig()
    upload: UploadConfig = UploadConfig()

    deepgram_api_key: str = ""
    openai_api_key: str = ""

    model_config = {"env_prefix": "RA_", "env_nested_delimiter": "__"}

    @property
    def tts_api_key(self) -> str:
        """Credential for the configured TTS provider."""
        if self.tts.provider == "openai":
            return self.openai_api_key
        return self.deepgram_api_key


def load_settings(config_path: str | None = None) -> Settings:
    """Load settings from config.yaml, overridden by env vars."""
    data: dict = {}
    if config_path is None:
        config_path = os.environ.get(
            "RA_CONFIG", str(Path(__file__).parent.parent / "config.yaml")
        )
    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            data = yaml.safe_load(f) or {}

    # Pull API keys from standard env vars if not in config
    if "deepgram_api_key" not in data:
        data["deepgram_api_key"] = os.environ.get("DEEPGRAM_API_KEY", "")
    if "openai_api_key" not in data:
        data["openai_api_key"] = os.environ.get("OPENAI_API_KEY", "")

    return Settings(**data)
