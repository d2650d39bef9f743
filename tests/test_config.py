from __future__ import annotations

import pytest

from attendance_pulse import config
from attendance_pulse.config import load_settings


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch):
    monkeypatch.setattr(config, "load_dotenv", lambda *args, **kwargs: None)
    for name in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "API_KEY", "HEADLINE_POLICY", "ROW_LIMIT"):
        monkeypatch.delenv(name, raising=False)


def _required(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co/")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.setenv("API_KEY", "secret")


def test_defaults(monkeypatch):
    _required(monkeypatch)

    settings = load_settings()

    assert settings.supabase_url == "https://example.supabase.co"
    assert settings.roster_table == "senarai_peserta_penuh"
    assert settings.checkin_table == "pendaftaran"
    assert settings.row_limit == 10000
    assert settings.schedule_row_limit == 5000
    assert settings.headline_policy == "peak"


def test_missing_url_is_rejected(monkeypatch):
    _required(monkeypatch)
    monkeypatch.delenv("SUPABASE_URL")

    with pytest.raises(RuntimeError, match="SUPABASE_URL"):
        load_settings()


def test_policy_is_validated(monkeypatch):
    _required(monkeypatch)
    monkeypatch.setenv("HEADLINE_POLICY", "median")

    with pytest.raises(RuntimeError, match="HEADLINE_POLICY"):
        load_settings()


def test_policy_and_limits_are_read(monkeypatch):
    _required(monkeypatch)
    monkeypatch.setenv("HEADLINE_POLICY", "Average")
    monkeypatch.setenv("ROW_LIMIT", "200")

    settings = load_settings()

    assert settings.headline_policy == "average"
    assert settings.row_limit == 200
