"""
Base configuration settings
"""

import os
from typing import List, Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Base settings configuration"""

    # Application settings
    APP_NAME: str = "Tubely"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # API settings
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8091
    PUBLIC_BASE_URL: str = "http://localhost:8091"
    ALLOWED_HOSTS_STR: str = "localhost,127.0.0.1"

    # Metadata store ("memory" or "redis")
    METADATA_BACKEND: str = "memory"

    # Redis settings
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: str = ""
    REDIS_DB: int = 0

    # AWS S3 settings
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "us-east-1"
    S3_BUCKET: str = "tubely-uploads"
    AWS_ENDPOINT_URL: Optional[str] = None

    # Where processed videos are published ("s3" or "local")
    VIDEO_STORAGE: str = "s3"
    PRESIGN_EXPIRE_MINUTES: int = 30

    # File upload settings
    MAX_UPLOAD_SIZE: int = 1 << 30  # 1GB
    MAX_THUMBNAIL_SIZE: int = 10 << 20  # 10MB
    ASSETS_ROOT: str = "./assets"
    STAGING_DIR: Optional[str] = None

    # Media tools
    FFPROBE_PATH: str = "ffprobe"
    FFMPEG_PATH: str = "ffmpeg"
    MEDIA_TOOL_TIMEOUT: int = 600  # 10 minutes

    # Security settings
    SECRET_KEY: str = "your-secret-key-change-in-production"

    # Logging settings
    LOG_LEVEL: str = "INFO"

    @property
    def ALLOWED_HOSTS(self) -> List[str]:
        """Parse allowed hosts from string"""
        hosts_str = os.getenv('ALLOWED_HOSTS', self.ALLOWED_HOSTS_STR)
        return [host.strip() for host in hosts_str.split(',')]

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore"  # Ignore extra fields from .env
    }
