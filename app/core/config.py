from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    # Admin UI origins allowed by CORS
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:8080"]

    # Connection pool for the HR database (ignored for SQLite)
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # Schema reconciliation inputs/outputs
    DEFAULT_DB_SCHEMA: str = "dbo"
    SCHEMA_SNAPSHOT_PATH: str = "scripts/schema.json"
    DECLARATION_WORKBOOK_PATH: str = "scripts/DB Information.xlsx"
    DECLARATION_SHEET: Optional[str] = None  # first sheet when unset
    MAPPING_OUTPUT_DIR: str = "scripts"

    SUGGESTION_THRESHOLD: float = 0.6
    SUGGESTION_LIMIT: int = 3

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
