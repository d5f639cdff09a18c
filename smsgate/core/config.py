from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "smsgate"
    APP_ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    ADMIN_TOKEN: str = "change-me-admin-token"
    AUTH_DISABLED: bool = False

    DATABASE_URL: str

    # Admin-settings key (system scope) that holds the active provider configuration.
    SMS_SETTINGS_KEY: str = "sms"
    # In unit tests we build the sender explicitly instead of reading the store on startup.
    SMS_REFRESH_ON_STARTUP: bool = True
    SMS_HTTP_TIMEOUT_S: float = 10.0

    TWILIO_API_BASE: str = "https://api.twilio.com"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
