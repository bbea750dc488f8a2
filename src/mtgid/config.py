"""Configuration utilities for the card identifier."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator

LOGGER = logging.getLogger(__name__)

API_KEY_ENV = "OPENAI_API_KEY"
ORG_ENV = "OPENAI_ORG"
MODEL_ENV = "MTGID_MODEL"
DEFAULT_MODEL_NAME = "gpt-4.1-mini"


class MissingAPIKey(RuntimeError):
    """Raised when the OpenAI API key cannot be located."""


class IdentifierConfig(BaseModel):
    """Runtime configuration for a batch identification run."""

    unidentified_dir: Path = Field(
        default_factory=lambda: Path.cwd() / "Unidentified",
        description="Directory containing the card photographs to identify.",
    )
    examples_dir: Path = Field(
        default_factory=lambda: Path.cwd() / "Examples",
        description="Directory of reference image + JSON label pairs used as few-shot context.",
    )
    allowed_extensions: Tuple[str, ...] = Field(
        default=(".jpg", ".jpeg", ".png"),
        description="Image file extensions that are picked up from the input directory.",
    )
    api_model: str = Field(
        default_factory=lambda: os.getenv(MODEL_ENV) or DEFAULT_MODEL_NAME,
        description="Vision model used for identification.",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        description="Retries allowed per image after the first attempt.",
    )
    request_delay: float = Field(
        default=1.0,
        ge=0,
        description="Seconds to wait between consecutive images.",
    )
    temperature: float = Field(default=1.0, ge=0, le=2)
    max_output_tokens: int = Field(default=8192, ge=1)
    image_max_edge: Optional[int] = Field(
        default=1568,
        ge=1,
        description="Downscale images whose longest edge exceeds this. None sends the file as-is.",
    )
    request_timeout: float = Field(default=60.0, gt=0)
    dry_run: bool = Field(
        default=False,
        description="If True, the model is never contacted and synthetic records are returned.",
    )

    @field_validator("unidentified_dir", "examples_dir", mode="before")
    @classmethod
    def _expand_path(cls, value: Path | str) -> Path:
        return Path(value).expanduser().resolve()

    @field_validator("allowed_extensions", mode="before")
    @classmethod
    def _normalise_extensions(cls, value: object) -> Tuple[str, ...]:
        if isinstance(value, str):
            value = [value]
        normalised = []
        for ext in value:  # type: ignore[union-attr]
            ext = str(ext).strip().lower()
            if not ext.startswith("."):
                ext = f".{ext}"
            normalised.append(ext)
        return tuple(normalised)


def load_env(project_root: Path) -> None:
    """Populate ``os.environ`` from ``project_root/.env`` without overriding set values."""

    env_path = project_root / ".env"
    if not env_path.exists():
        return
    for line in env_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        value = value.strip().strip('"').strip("'")
        os.environ.setdefault(key.strip(), value)


def read_api_key() -> str:
    api_key = os.getenv(API_KEY_ENV)
    if not api_key:
        raise MissingAPIKey(
            f"{API_KEY_ENV} is not set. Populate it in your .env or environment."
        )
    LOGGER.debug("Using %s from environment", API_KEY_ENV)
    return api_key


def read_organization() -> Optional[str]:
    return os.getenv(ORG_ENV) or None
