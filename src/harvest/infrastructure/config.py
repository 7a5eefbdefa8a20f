"""Runtime settings, read from the environment with development defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

# Repo root when installed in editable mode.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

# eSewa's published sandbox merchant; never a production secret.
SANDBOX_FORM_URL = "https://rc-epay.esewa.com.np/api/epay/main/v2/form"
SANDBOX_PRODUCT_CODE = "EPAYTEST"
SANDBOX_SECRET = "8gBm/:&EnhH.1/q"


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    api_base: str = "http://localhost:3000/api"
    api_token: str | None = None
    data_dir: Path = _DEFAULT_DATA_DIR
    http_timeout: float = 10.0
    esewa_form_url: str = SANDBOX_FORM_URL
    esewa_product_code: str = SANDBOX_PRODUCT_CODE
    esewa_secret: str = SANDBOX_SECRET
    success_url: str = "http://localhost:4200/payment/success"
    failure_url: str = "http://localhost:4200/payment/failure"
    allow_unsigned_callbacks: bool = False

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        defaults = Settings()
        return Settings(
            api_base=env.get("HARVEST_API_BASE", defaults.api_base),
            api_token=env.get("HARVEST_API_TOKEN") or None,
            data_dir=Path(env.get("HARVEST_DATA_DIR", str(defaults.data_dir))),
            http_timeout=float(env.get("HARVEST_HTTP_TIMEOUT", defaults.http_timeout)),
            esewa_form_url=env.get("HARVEST_ESEWA_FORM_URL", defaults.esewa_form_url),
            esewa_product_code=env.get("HARVEST_ESEWA_PRODUCT_CODE", defaults.esewa_product_code),
            esewa_secret=env.get("HARVEST_ESEWA_SECRET", defaults.esewa_secret),
            success_url=env.get("HARVEST_SUCCESS_URL", defaults.success_url),
            failure_url=env.get("HARVEST_FAILURE_URL", defaults.failure_url),
            allow_unsigned_callbacks=_flag(env.get("HARVEST_ALLOW_UNSIGNED_CALLBACKS")),
        )
