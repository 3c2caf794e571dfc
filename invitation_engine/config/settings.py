# invitation_engine/config/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # API
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Invitation Engine"

    # CORS
    ALLOWED_HOSTS: List[str] = ["*"]

    # Templates & assets
    TEMPLATES_DIR: str = "public/invitations"
    FONTS_DIR: str = "assets/fonts"
    REQUEST_TIMEOUT: int = 30

    # Locale
    DEFAULT_LOCALE: str = "en"

    # Export
    PDF_MARGIN_MM: float = 5.0
    PRINT_DELAY_MS: int = 500
    PRINT_CLOSE_MS: int = 2000
    FOLDED_CARD_WIDTH: int = 1200
    FOLDED_CARD_HEIGHT: int = 800

    # Env
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

settings = Settings()
