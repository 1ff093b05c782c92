from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    OPENAI_API_KEY: str | None = None

    OPENAI_MODEL_EXTRACT: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE_EXTRACT: float = 0.0

    BUSINESS_NAME: str = "Your Business"
    ASSISTANT_NAME: str = "Aiden"
    BUSINESS_TIMEZONE: str = "America/Los_Angeles"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BOOKINGS_DATA_PATH: str = "./data/bookings.json"
    DEFAULT_DURATION_MINUTES: int = 45
    UPCOMING_GRACE_HOURS: int = 3


settings = Settings()
