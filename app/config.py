"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    # Database
    DATABASE_URL: str
    
    # Identity provider (JWT verification)
    SUPABASE_JWT_SECRET: str = ""
    JWT_AUDIENCE: str = "authenticated"
    ALLOW_USER_ID_COOKIE: bool = True
    
    # Shared key for the bulk activity endpoints (empty disables them)
    ADMIN_API_KEY: str = ""
    
    # Redis (empty string disables caching)
    REDIS_URL: str = "redis://redis:6379/0"
    
    # Application
    APP_NAME: str = "QuizCat Progress Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    
    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000
    
    # Caching
    LEADERBOARD_CACHE_TTL: int = 60
    CONTENT_COUNT_CACHE_TTL: int = 3600  # 1 hour
    
    # Progression
    QUESTIONS_PER_TOPIC: int = 50
    QUESTION_WINDOW_SIZE: int = 10
    LEADERBOARD_DEFAULT_LIMIT: int = 50
    LEADERBOARD_MAX_LIMIT: int = 100
    
    # Logging
    LOG_LEVEL: str = "INFO"
    
    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
