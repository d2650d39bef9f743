"""Configuration helpers for Attendance Pulse."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

HEADLINE_POLICY_NAMES = ("peak", "average")


@dataclass(slots=True)
class Settings:
    """Runtime configuration values loaded from environment variables."""

    supabase_url: str
    supabase_key: str
    api_key: str
    roster_table: str = "senarai_peserta_penuh"
    checkin_table: str = "pendaftaran"
    row_limit: int = 10000
    schedule_row_limit: int = 5000
    headline_policy: str = "peak"
    debounce_seconds: float = 0.3
    request_timeout: float = 10.0


def load_settings(env_file: str | None = None) -> Settings:
    """Load settings from the environment, optionally from a specific file."""

    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    supabase_url = os.getenv("SUPABASE_URL")
    supabase_key = os.getenv("SUPABASE_ANON_KEY")
    api_key = os.getenv("API_KEY")

    if not supabase_url:
        raise RuntimeError("SUPABASE_URL must be configured")
    if not supabase_key:
        raise RuntimeError("SUPABASE_ANON_KEY must be configured")
    if not api_key:
        raise RuntimeError("API_KEY must be configured")

    policy = os.getenv("HEADLINE_POLICY", "peak").strip().lower()
    if policy not in HEADLINE_POLICY_NAMES:
        raise RuntimeError(
            f"HEADLINE_POLICY must be one of: {', '.join(HEADLINE_POLICY_NAMES)}"
        )

    return Settings(
        supabase_url=supabase_url.rstrip("/"),
        supabase_key=supabase_key,
        api_key=api_key,
        roster_table=os.getenv("ROSTER_TABLE", "senarai_peserta_penuh"),
        checkin_table=os.getenv("CHECKIN_TABLE", "pendaftaran"),
        row_limit=int(os.getenv("ROW_LIMIT", "10000")),
        schedule_row_limit=int(os.getenv("SCHEDULE_ROW_LIMIT", "5000")),
        headline_policy=policy,
        debounce_seconds=float(os.getenv("DEBOUNCE_SECONDS", "0.3")),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "10.0")),
    )


__all__ = ["HEADLINE_POLICY_NAMES", "Settings", "load_settings"]
