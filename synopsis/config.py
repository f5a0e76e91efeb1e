from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field


class ChunkingSettings(BaseModel):
    # Tokenizer used only to measure chunk length against the model input limit.
    tokenizer_name: str = "bert-base-cased"
    max_tokens: int = Field(default=512, gt=0)


class DecodingSettings(BaseModel):
    num_beams: int = Field(default=4, ge=1, le=8)
    min_length: int = Field(default=56, ge=0)
    max_length: int = Field(default=142, ge=1)
    no_repeat_ngram_size: int = Field(default=3, ge=0)
    length_penalty: float = 1.0


class ModelSettings(BaseModel):
    model_name: str = "facebook/bart-large-cnn"
    device: Literal["auto", "cpu", "cuda"] = "auto"
    max_input_tokens: int = Field(default=1024, gt=0)
    decoding: DecodingSettings = Field(default_factory=DecodingSettings)


class LoopSettings(BaseModel):
    # 0 disables the cap; the fixed-point check is then the only guard.
    max_iterations: int = Field(default=25, ge=0)
    ready_timeout_s: Optional[float] = Field(default=None, gt=0)


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    max_pending: int = Field(default=0, ge=0)
    fail_fast: bool = True


class LoggingSettings(BaseModel):
    log_dir: str = "logs"
    level: str = "INFO"


class Settings(BaseModel):
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    model: ModelSettings = Field(default_factory=ModelSettings)
    loop: LoopSettings = Field(default_factory=LoopSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_settings(config_path: Optional[str | Path] = None) -> Settings:
    path = Path(config_path) if config_path else Path(__file__).resolve().parents[1] / "config.yaml"
    if not path.exists():
        return Settings()
    raw: Any
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return Settings.model_validate(raw)
