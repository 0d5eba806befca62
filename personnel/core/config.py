import sys

from pydantic_settings import BaseSettings

_ENV_FILE = None if "pytest" in sys.modules else ".env"


class Settings(BaseSettings):
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    PERSONNEL_API_URL: str = "http://localhost:8089"
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    OVERVIEW_STATE_FILE: str = ".personnel/ui-state.json"
    FILTER_DEBOUNCE_MS: int = 300

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    model_config = {
        "env_file": _ENV_FILE,
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


settings = Settings()
