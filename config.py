"""Configuration management using Pydantic settings."""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Shared secret checked on every build request
    student_secret: str

    # GitHub configuration
    github_token: str
    default_branch: str = "main"
    
    # OpenAI-compatible generation service
    openai_api_key: str
    openai_base_url: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    
    # Server configuration
    port: int = 8000
    log_level: str = "INFO"
    
    # Notification retry configuration
    notify_max_attempts: int = 4
    notify_base_delay: float = 1.0
    
    # Flat wait after round 1 before reporting the Pages URL (seconds)
    pages_propagation_delay: float = 5.0
    
    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
