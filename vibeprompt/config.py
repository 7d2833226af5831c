"""
Settings for the generation layer.

Resolution order, lowest to highest: dataclass defaults, an optional YAML
file, then environment variables (``.env`` is loaded first).
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml
from dotenv import load_dotenv

from .cache import DEFAULT_TTL_SECONDS
from .llm_clients import DEFAULT_MODEL
from .utils import BASE_DELAY, MAX_ATTEMPTS, MAX_DELAY

PROVIDERS = ("openai", "anthropic")

API_KEY_ENV = {
    "openai": ("GEMINI_API_KEY", "OPENAI_API_KEY"),
    "anthropic": ("ANTHROPIC_API_KEY",),
}


@dataclass
class Settings:
    """Process-wide generation settings."""

    provider: str = "openai"
    api_key: str | None = None
    base_url: str | None = None
    models: list[str] = field(default_factory=lambda: [DEFAULT_MODEL])
    temperature: float = 0.7
    top_p: float = 0.95
    max_output_tokens: int = 8192
    max_attempts: int = MAX_ATTEMPTS
    base_delay: float = BASE_DELAY
    max_delay: float = MAX_DELAY
    attempt_timeout: float = 60.0
    cache_url: str | None = None
    cache_ttl: int = DEFAULT_TTL_SECONDS
    log_level: str = "INFO"

    def __post_init__(self):
        if self.provider not in PROVIDERS:
            raise ValueError(f"Unknown provider '{self.provider}'. Available: {', '.join(PROVIDERS)}")
        if isinstance(self.models, str):
            self.models = _split_models(self.models)
        if not self.models:
            raise ValueError("At least one model must be configured")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    @property
    def primary_model(self) -> str:
        return self.models[0]


def _split_models(value: str) -> list[str]:
    return [m.strip() for m in value.split(",") if m.strip()]


# env var -> (field, converter)
ENV_OVERRIDES = {
    "VIBEPROMPT_PROVIDER": ("provider", str),
    "VIBEPROMPT_BASE_URL": ("base_url", str),
    "VIBEPROMPT_MODELS": ("models", _split_models),
    "VIBEPROMPT_TEMPERATURE": ("temperature", float),
    "VIBEPROMPT_TOP_P": ("top_p", float),
    "VIBEPROMPT_MAX_OUTPUT_TOKENS": ("max_output_tokens", int),
    "VIBEPROMPT_MAX_ATTEMPTS": ("max_attempts", int),
    "VIBEPROMPT_BASE_DELAY": ("base_delay", float),
    "VIBEPROMPT_MAX_DELAY": ("max_delay", float),
    "VIBEPROMPT_ATTEMPT_TIMEOUT": ("attempt_timeout", float),
    "REDIS_URL": ("cache_url", str),
    "REDIS_CACHE_TTL": ("cache_ttl", int),
    "VIBEPROMPT_LOG_LEVEL": ("log_level", str),
}


def _load_yaml(config_path: str | Path) -> dict:
    path = Path(config_path)
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Build Settings from defaults, YAML (if given) and the environment."""
    load_dotenv()

    if config_path is None:
        config_path = os.environ.get("VIBEPROMPT_CONFIG") or None
    data = _load_yaml(config_path) if config_path else {}

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
    kwargs = dict(data)

    for env_name, (field_name, convert) in ENV_OVERRIDES.items():
        raw = os.environ.get(env_name, "").strip()
        if not raw:
            continue
        try:
            kwargs[field_name] = convert(raw)
        except ValueError as exc:
            raise ValueError(f"Invalid value for {env_name}: {raw!r}") from exc

    provider = kwargs.get("provider", Settings.provider)
    if not kwargs.get("api_key"):
        for env_name in API_KEY_ENV.get(provider, ()):
            key = os.environ.get(env_name, "").strip()
            if key:
                kwargs["api_key"] = key
                break

    return Settings(**kwargs)
