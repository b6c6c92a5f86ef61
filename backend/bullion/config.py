# backend/bullion/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/bullion.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///bullion.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer credentials are issued for one working shift
    SESSION_ABSOLUTE_TIMEOUT_HOURS = int(os.environ.get("SESSION_ABSOLUTE_TIMEOUT_HOURS", "8"))

    # Melting: loss above this percentage of input weight is flagged for audit
    MELT_LOSS_THRESHOLD_PERCENT = float(os.environ.get("MELT_LOSS_THRESHOLD_PERCENT", "5.0"))

    # Purchase invoice GST, applied once to the taxable subtotal
    GST_RATE_PERCENT = 3

    AUDIT_LOG_PAGE_SIZE = 100
    AUDIT_LOG_MAX_PAGE_SIZE = 500

    REQUIRE_VERIFIED_KYC = _env_bool("REQUIRE_VERIFIED_KYC", False)

    CORS_ALLOWED_ORIGINS = tuple(
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
        ).split(",")
        if origin.strip()
    )
