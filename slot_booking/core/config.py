from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BOOKING_API_URL: str = "https://booking-backend-eight.vercel.app"
    BOOKING_API_KEY: str | None = None
    BUSINESS_TIMEZONE: str = "Europe/Prague"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    SERVICE_CATALOG_PATH: str | None = None
    SERVICE_CATALOG_URL: str | None = None

    ON_SUCCESS: str = "redirect"  # "redirect" | "reset_in_place"
    ON_RATE_LIMITED: str = "redirect"  # "redirect" | "inline"
    SUCCESS_REDIRECT_URL: str = "/uspesnarezervace"
    BLOCKED_REDIRECT_URL: str = "/blocked"

    IDENTITY_STORE_PATH: str | None = None
    WINDOWS_MAX_AGE_SECONDS: float = 60.0
    DISCARD_OUT_OF_ORDER_FETCHES: bool = False


settings = Settings()
