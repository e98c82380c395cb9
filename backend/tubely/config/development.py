"""
Development environment configuration
"""

from tubely.config.base import Settings


class DevelopmentSettings(Settings):
    """Development-specific settings"""

    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"

    # Publish to disk and keep metadata in memory
    VIDEO_STORAGE: str = "local"
    METADATA_BACKEND: str = "memory"
    S3_BUCKET: str = "tubely-dev-uploads"

    ASSETS_ROOT: str = "./assets"

    model_config = {**Settings.model_config, "env_file": ".env.development"}
