from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional


# Try to load a .env file if python-dotenv is available. This is optional.
try:  # pragma: no cover - optional convenience
    from dotenv import load_dotenv  # type: ignore

    load_dotenv()
except Exception:  # noqa: BLE001 - optional dependency
    pass


_TRUTHY = {"1", "true", "TRUE", "yes", "on"}


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"LEXIBAYES_{name}", default)


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    All values have sensible defaults for local development.
    """

    # Logging
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO").upper())
    log_format: str = field(default_factory=lambda: _env("LOG_FORMAT", "text").lower())  # text | json
    log_file: Optional[str] = field(default_factory=lambda: _env("LOG_FILE"))
    boto_log_level: str = field(default_factory=lambda: _env("BOTO_LOG_LEVEL", "WARNING").upper())

    # Persistence backends
    classifier_dir: str = field(default_factory=lambda: _env("CLASSIFIER_DIR", "."))
    blob_bucket: Optional[str] = field(default_factory=lambda: _env("BLOB_BUCKET"))
    blob_prefix: str = field(default_factory=lambda: _env("BLOB_PREFIX", ""))
    aws_region: Optional[str] = field(default_factory=lambda: _env("AWS_REGION"))

    # Naive Bayes smoothing
    alpha: float = field(default_factory=lambda: float(_env("ALPHA", "1.0")))

    # Reproducibility; unset leaves character shuffles unseeded
    shuffle_seed: Optional[int] = field(default_factory=lambda: _optional_int(_env("SHUFFLE_SEED")))

    # NLTK tagger resources
    nltk_auto_download: bool = field(default_factory=lambda: _env("NLTK_AUTO_DOWNLOAD", "1") in _TRUTHY)


def get_settings() -> Settings:
    """Return current settings snapshot.

    Re-evaluates the environment on each call.
    """
    return Settings()
