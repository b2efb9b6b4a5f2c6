"""Environment-derived settings for the gateway.

Values are read once at startup and passed explicitly to the components that
need them. Nothing in the dispatch core reads the environment directly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_API_VERSION = "2024-02-01"
DEFAULT_IMAGE_DEPLOYMENT = "dall-e-3"
DEFAULT_UPLOAD_DIR = Path(__file__).resolve().parent.parent / "uploads" / "temp"

_SIZE_UNITS = {"KB": 1024, "MB": 1024 * 1024, "GB": 1024 * 1024 * 1024, "B": 1}


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def parse_size(value: Optional[str], default: int) -> int:
    """Parse sizes such as `10MB` or `512KB` into bytes.

    Raises:
        ValueError: If the value is not a number with an optional unit.
    """
    text = _clean(value)
    if text is None:
        return default
    text = text.upper()
    for unit, factor in _SIZE_UNITS.items():
        if text.endswith(unit):
            return int(float(text[: -len(unit)].strip()) * factor)
    return int(text)


@dataclass(frozen=True)
class AzureOpenAISettings:
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    deployment_name: Optional[str] = None
    api_version: str = DEFAULT_API_VERSION
    image_deployment: str = DEFAULT_IMAGE_DEPLOYMENT

    @property
    def chat_configured(self) -> bool:
        return bool(self.endpoint and self.api_key and self.deployment_name)

    @property
    def images_configured(self) -> bool:
        return bool(self.endpoint and self.api_key)


@dataclass(frozen=True)
class DeepSeekSettings:
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    model: Optional[str] = None
    api_version: str = DEFAULT_API_VERSION

    @property
    def configured(self) -> bool:
        return bool(self.endpoint and self.api_key and self.model)


@dataclass(frozen=True)
class GatewaySettings:
    """Top-level settings object built from the process environment."""

    azure: AzureOpenAISettings = field(default_factory=AzureOpenAISettings)
    deepseek: DeepSeekSettings = field(default_factory=DeepSeekSettings)
    grok_api_key: Optional[str] = None
    upload_dir: Path = DEFAULT_UPLOAD_DIR
    upload_retention_seconds: int = 3_600
    max_file_size: int = 10 * 1024 * 1024
    environment: str = "development"
    port: int = 3001
    version: str = "1.0.0"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "GatewaySettings":
        """Build settings from `env` (defaults to `os.environ`)."""
        env = os.environ if env is None else env
        azure = AzureOpenAISettings(
            endpoint=_clean(env.get("AZURE_OPENAI_ENDPOINT")),
            api_key=_clean(env.get("AZURE_OPENAI_API_KEY")),
            deployment_name=_clean(env.get("AZURE_OPENAI_DEPLOYMENT_NAME")),
            api_version=_clean(env.get("AZURE_OPENAI_API_VERSION")) or DEFAULT_API_VERSION,
            image_deployment=_clean(env.get("AZURE_OPENAI_IMAGE_DEPLOYMENT")) or DEFAULT_IMAGE_DEPLOYMENT,
        )
        deepseek = DeepSeekSettings(
            endpoint=_clean(env.get("DEEPSEEK_ENDPOINT")),
            api_key=_clean(env.get("DEEPSEEK_API_KEY")),
            model=_clean(env.get("DEEPSEEK_MODEL")),
            api_version=_clean(env.get("DEEPSEEK_API_VERSION")) or DEFAULT_API_VERSION,
        )
        upload_dir = _clean(env.get("UPLOAD_DIR"))
        return cls(
            azure=azure,
            deepseek=deepseek,
            grok_api_key=_clean(env.get("GROK_API_KEY")),
            upload_dir=Path(upload_dir).expanduser() if upload_dir else DEFAULT_UPLOAD_DIR,
            upload_retention_seconds=int(_clean(env.get("UPLOAD_RETENTION_SECONDS")) or 3_600),
            max_file_size=parse_size(env.get("MAX_FILE_SIZE"), 10 * 1024 * 1024),
            environment=_clean(env.get("APP_ENV")) or "development",
            port=int(_clean(env.get("PORT")) or 3001),
            version=_clean(env.get("APP_VERSION")) or "1.0.0",
        )
