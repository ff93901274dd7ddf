"""Runtime settings, read from the environment once at start-up."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from storefront.domain.exceptions import ValidationError

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    log_level: str = "WARNING"
    redirect_delay: float = 3.0
    confirm_timeout: float = 120.0
    external_payment_timeout: float = 600.0
    transition_policy: str = "permissive"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValidationError(f"{name} cannot be negative, got {raw!r}")
    return value


def load_settings() -> Settings:
    return Settings(
        data_dir=Path(os.getenv("STOREFRONT_DATA_DIR") or _DEFAULT_DATA_DIR),
        log_level=(os.getenv("STOREFRONT_LOG_LEVEL") or "WARNING").upper(),
        redirect_delay=_float_env("STOREFRONT_REDIRECT_DELAY", 3.0),
        confirm_timeout=_float_env("STOREFRONT_CONFIRM_TIMEOUT", 120.0),
        external_payment_timeout=_float_env("STOREFRONT_EXTERNAL_PAYMENT_TIMEOUT", 600.0),
        transition_policy=os.getenv("STOREFRONT_TRANSITION_POLICY") or "permissive",
    )
