from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Tubely API"
    VERSION: str = "1.0.0"
    PORT: int = 8091
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./tubely.db"

    # Security
    JWT_SECRET: str = "change-this-secret-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # File Upload
    ASSETS_ROOT: str = "assets"
    MAX_THUMBNAIL_SIZE: int = 10 << 20  # 10MB
    MAX_VIDEO_SIZE: int = 1 << 30  # 1GB

    # Object storage
    S3_BUCKET: str = "tubely-videos"
    S3_REGION: str = "us-east-1"
    S3_CF_DISTRIBUTION: str = "localhost"
    S3_ENDPOINT_URL: Optional[str] = None

    # Media tools
    FFPROBE_PATH: str = "ffprobe"
    FFMPEG_PATH: str = "ffmpeg"
    MEDIA_TOOL_TIMEOUT: Optional[float] = None

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()


def get_settings() -> Settings:
    return settings
