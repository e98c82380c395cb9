"""
Production environment configuration
"""

from tubely.config.base import Settings


class ProductionSettings(Settings):
    """Production-specific settings"""

    DEBUG: bool = False
    LOG_LEVEL: str = "WARNING"

    # Production services
    VIDEO_STORAGE: str = "s3"
    METADATA_BACKEND: str = "redis"
    S3_BUCKET: str = "tubely-prod-uploads"

    # Strict timeouts for production
    MEDIA_TOOL_TIMEOUT: int = 300  # 5 minutes

    # Enhanced security
    SECRET_KEY: str = ""  # Must be set via environment variable

    model_config = {**Settings.model_config, "env_file": ".env.production"}
