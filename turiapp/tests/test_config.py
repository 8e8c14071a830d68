import importlib.util
from datetime import timedelta

import dotenv
import pytest

from ..core import config
from ..core.config import parse_duration


@pytest.mark.parametrize("value, expected", [
    ("24h", timedelta(hours=24)),
    ("30m", timedelta(minutes=30)),
    ("7d", timedelta(days=7)),
    ("45s", timedelta(seconds=45)),
    ("3600", timedelta(seconds=3600)),
    (" 2h ", timedelta(hours=2)),
])
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", ["", "h", "1w", "-5m", "ten"])
def test_parse_duration_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_duration(value)


def _load_config_copy():
    spec = importlib.util.spec_from_file_location("turiapp_config_probe", config.__file__)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_missing_jwt_secret_fails_at_import(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.setattr(dotenv, "load_dotenv", lambda *args, **kwargs: False)
    with pytest.raises(RuntimeError, match="JWT_SECRET"):
        _load_config_copy()


def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "another-secret")
    monkeypatch.setenv("JWT_EXPIRES_IN", "15m")
    monkeypatch.setenv("APP_ENV", "Production")
    monkeypatch.setattr(dotenv, "load_dotenv", lambda *args, **kwargs: False)
    module = _load_config_copy()
    assert module.ACCESS_TOKEN_EXPIRE == timedelta(minutes=15)
    assert module.IS_PRODUCTION is True
