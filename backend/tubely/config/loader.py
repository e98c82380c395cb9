"""
Environment-aware settings selection
"""

import os

from tubely.config.base import Settings
from tubely.config.development import DevelopmentSettings
from tubely.config.production import ProductionSettings

_ENVIRONMENTS = {
    "development": DevelopmentSettings,
    "production": ProductionSettings,
}


def load_settings(environment: str = None) -> Settings:
    """Build settings for TUBELY_ENV (base settings when unset or unknown)"""
    environment = (environment or os.getenv("TUBELY_ENV", "")).strip().lower()
    settings_class = _ENVIRONMENTS.get(environment, Settings)
    return settings_class()
