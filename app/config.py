from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "Drive"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./drive.db"

    # Security settings
    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # CORS settings
    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # File manager settings
    upload_dir: str = "uploads"
    max_upload_size: int = 50 * 1024 * 1024
    max_tree_depth: int = 32

    # Logging settings
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
