from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Literal, Optional

class Settings(BaseSettings):
    database_url: str = "sqlite:///./treasury_chat.db"
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expiration: int = 3600
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-pro"
    llm_timeout_seconds: float = 30.0
    trade_detection_mode: Literal["pattern", "llm"] = "pattern"
    enforce_trade_transitions: bool = False
    frontend_url: str = "http://localhost:3000"
    log_level: str = "INFO"
    council_name: str = "Birmingham City Council"
    council_code: str = "BCC-4578"
    financial_year: str = "2023/24"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

@lru_cache()
def get_settings():
    return Settings()

settings = get_settings()
