from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="PII Protector API", alias="APP_NAME")
    app_env: str = Field(default="local", alias="APP_ENV")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_pii_safe: bool = Field(default=True, alias="LOG_PII_SAFE")

    ollama_url: str = Field(default="http://localhost:11434", alias="OLLAMA_URL")
    ollama_model: str = Field(default="qwen2.5:7b", alias="OLLAMA_MODEL")
    ollama_timeout_s: int = Field(default=120, alias="OLLAMA_TIMEOUT_S")
    scan_timeout_s: int = Field(default=300, alias="SCAN_TIMEOUT_S")

    categories_path: str = Field(default="config/categories.yaml", alias="CATEGORIES_PATH")
    fuzzy_padding: int = Field(default=2, ge=0, alias="FUZZY_PADDING")
    max_input_chars: int = Field(default=5 * 1024 * 1024, gt=0, alias="MAX_INPUT_CHARS")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
