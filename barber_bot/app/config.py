from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    TG_BOT_TOKEN: str = ""
    API_URL: str = "http://localhost:3333"
    API_TOKEN: Optional[str] = None

    REQUEST_TIMEOUT: float = 10.0
    SUBMIT_TIMEOUT: Optional[float] = 15.0

    # Telegram inline calendar behaves like a touch date picker
    DATE_PICKER_AUTO_CLOSE: bool = True

    DEFAULT_LANG: str = "en"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )


settings = Settings()

BOT_TOKEN = settings.TG_BOT_TOKEN
API_URL = settings.API_URL
API_TOKEN = settings.API_TOKEN
REQUEST_TIMEOUT = settings.REQUEST_TIMEOUT
SUBMIT_TIMEOUT = settings.SUBMIT_TIMEOUT
DATE_PICKER_AUTO_CLOSE = settings.DATE_PICKER_AUTO_CLOSE
