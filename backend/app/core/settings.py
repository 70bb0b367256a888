from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Freelance Flow"
    api_version: str = "1.0.0"
    environment: str = "development"
    secret_key: str = "CHANGE_ME"
    access_token_expire_minutes: int = 60 * 24
    database_url: str = "sqlite:///./freelance_flow.db"
    upload_dir: str = "./uploads"
    max_upload_size: int = 5 * 1024 * 1024
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_prefix="FREELANCE_FLOW_", env_file=".env", extra="ignore")


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
