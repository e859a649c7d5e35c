"""
Application configuration management
"""
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """
    # Application
    APP_NAME: str = "inhouse"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    PORT: int = 3232

    # MongoDB
    MONGODB_HOST: str = Field(
        "localhost",
        validation_alias=AliasChoices("MONGODB_HOST", "MONGODB_PORT_27017_TCP_ADDR"),
    )
    MONGODB_DB_NAME: str = "inhouse"
    RESOURCE_CACHE_SIZE: int = 1024

    # GitHub webhook
    GITHUB_SECRET: Optional[str] = None

    # Build queue
    HOOK_COLLECTION: str = "_hook"
    BUILD_QUEUE_COLLECTION: str = "buildqueue"
    BUILD_BRANCH_REF: str = "refs/heads/master"

    @property
    def MONGODB_URL(self) -> str:
        return f"mongodb://{self.MONGODB_HOST}/{self.MONGODB_DB_NAME}"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env

# Global settings instance
settings = Settings()
