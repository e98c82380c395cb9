"""Settings selection tests"""

import pytest

from tubely.config.base import Settings
from tubely.config.development import DevelopmentSettings
from tubely.config.loader import load_settings
from tubely.config.production import ProductionSettings


@pytest.mark.parametrize("environment,expected", [
    ("development", DevelopmentSettings),
    ("Production", ProductionSettings),
    ("", Settings),
    ("staging", Settings),
])
def test_load_settings_by_name(environment, expected):
    assert type(load_settings(environment)) is expected


def test_environment_variable_selects_settings(monkeypatch):
    monkeypatch.setenv("TUBELY_ENV", "development")

    settings = load_settings()

    assert isinstance(settings, DevelopmentSettings)
    assert settings.VIDEO_STORAGE == "local"


def test_defaults_match_upload_limits():
    settings = Settings()

    assert settings.MAX_UPLOAD_SIZE == 1 << 30
    assert settings.PRESIGN_EXPIRE_MINUTES == 30


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("S3_BUCKET", "from-env")
    monkeypatch.setenv("ALLOWED_HOSTS", "a.example, b.example")

    settings = Settings()

    assert settings.S3_BUCKET == "from-env"
    assert settings.ALLOWED_HOSTS == ["a.example", "b.example"]
