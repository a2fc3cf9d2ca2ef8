from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from quizgen.models import DEFAULT_QUANTITIES, Quantities
from quizgen.retry import RetryPolicy

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

DEFAULTS = {
    "llm_provider": "gemini",
    "llm_model": "gemini-2.0-flash",
    "ollama_url": "http://localhost:11434",
    "gemini_url": "https://generativelanguage.googleapis.com/v1beta",
    "safety_threshold": "BLOCK_MEDIUM_AND_ABOVE",
    "temperature": 0.7,
    "top_p": 0.8,
    "top_k": 40,
    "max_output_tokens": 8192,
    "request_timeout": 120.0,
    "chunk_size": 4000,
    "short_input_threshold": 3000,
    "cache_expiry_hours": 24,
    "cache_max_entries": 100,
    "retry_max_attempts": 3,
    "retry_initial_delay": 0.5,
    "retry_max_delay": 5.0,
    "retry_factor": 2.0,
    "default_quantities": DEFAULT_QUANTITIES,
}


@dataclass
class Settings:
    llm_provider: str = DEFAULTS["llm_provider"]
    llm_model: str = DEFAULTS["llm_model"]
    ollama_url: str = DEFAULTS["ollama_url"]
    gemini_url: str = DEFAULTS["gemini_url"]
    safety_threshold: str = DEFAULTS["safety_threshold"]
    temperature: float = DEFAULTS["temperature"]
    top_p: float = DEFAULTS["top_p"]
    top_k: int = DEFAULTS["top_k"]
    max_output_tokens: int = DEFAULTS["max_output_tokens"]
    request_timeout: float = DEFAULTS["request_timeout"]
    chunk_size: int = DEFAULTS["chunk_size"]
    short_input_threshold: int = DEFAULTS["short_input_threshold"]
    cache_expiry_hours: float = DEFAULTS["cache_expiry_hours"]
    cache_max_entries: int = DEFAULTS["cache_max_entries"]
    retry_max_attempts: int = DEFAULTS["retry_max_attempts"]
    retry_initial_delay: float = DEFAULTS["retry_initial_delay"]
    retry_max_delay: float = DEFAULTS["retry_max_delay"]
    retry_factor: float = DEFAULTS["retry_factor"]
    default_quantities: dict = field(default_factory=lambda: dict(DEFAULTS["default_quantities"]))

    @property
    def cache_expiry_seconds(self) -> float:
        return self.cache_expiry_hours * 60 * 60

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.retry_max_attempts,
            initial_delay=self.retry_initial_delay,
            max_delay=self.retry_max_delay,
            factor=self.retry_factor,
        )

    def quantities(self, raw: dict | None = None) -> Quantities:
        """Document-level quantities from a request, defaulting from settings."""
        return Quantities.from_request(raw, self.default_quantities)

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        filtered = {k: v for k, v in raw.items() if k in known}
        return Settings(**filtered)
    return Settings()


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4) + "\n")
