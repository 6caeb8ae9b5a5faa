from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(default="sqlite:///./sample_app.db")
    app_name: str = "Sample App"
    # Signs the session cookie. Changing it invalidates every existing session.
    secret_key: str = Field(default="dev-change-me-to-at-least-30-random-chars")
    session_cookie: str = "_sample_app_session"
    session_max_age: int = 14 * 24 * 60 * 60
    users_per_page: int = 30
    microposts_per_page: int = 30
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
