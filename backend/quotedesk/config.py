"""
Engine configuration — single source of truth for pricing defaults,
validation keywords and service-level settings.

Import from here in services and routes rather than hardcoding values.
"""
from __future__ import annotations

import os


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


# ── Unit conversion ────────────────────────────────────────────────────────────
# 1 sq.ft = 304.8 mm × 304.8 mm
MM2_PER_SQFT: float = 92903.04


# ── Pricing defaults ───────────────────────────────────────────────────────────
DEFAULT_GST_PERCENTAGE: float = _env_float("DEFAULT_GST_PERCENTAGE", 18.0)
DEFAULT_PRICE_PER_SQFT: float = _env_float("DEFAULT_PRICE_PER_SQFT", 130.0)


# ── Document lifecycle ─────────────────────────────────────────────────────────
QUOTATION_VALIDITY_DAYS: int = _env_int("QUOTATION_VALIDITY_DAYS", 30)
SALES_ORDER_DELIVERY_DAYS: int = _env_int("SALES_ORDER_DELIVERY_DAYS", 30)
DEFAULT_TERMS: str = "Standard terms and conditions apply"


# ── Quotation validation ───────────────────────────────────────────────────────
# Accessory keywords every quotation is expected to mention somewhere.
REQUIRED_ACCESSORIES: list[str] = [
    item.strip().lower()
    for item in os.getenv(
        "REQUIRED_ACCESSORIES", "skirting,handles,sliding mechanism,t profile"
    ).split(",")
    if item.strip()
]


# ── Service ────────────────────────────────────────────────────────────────────
API_VERSION: str = "1.0.0"
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json").lower()
CORS_ORIGINS: list[str] = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if o.strip()
]
