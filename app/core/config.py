from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    SCHEDULE_TIMEZONE: str = "America/Mexico_City"
    SLOT_DURATION_MINUTES: int = 60

    STORE_PROVIDER: str | None = None
    STORE_DATA_DIR: str = "./data/schedule"

    CAL_COM_API_KEY: str | None = None
    CAL_COM_CALENDAR_ID: str | None = None
    CAL_COM_BASE_URL: str = "https://api.cal.com/v1"

    EXTERNAL_TIMEOUT_SECONDS: float = 10.0

    NOTIFY_API_KEY: str | None = None
    NOTIFY_SEND_ENDPOINT: str = "https://api.resend.com/emails"
    NOTIFY_FROM_EMAIL: str = "scheduling@example.com"
    NOTIFICATIONS_ENABLED: bool = False

    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL_AGENT: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE_AGENT: float = 0.0


settings = Settings()
