import sys

from pydantic_settings import BaseSettings

_ENV_FILE = None if "pytest" in sys.modules else ".env"


class Settings(BaseSettings):
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    SUPABASE_TIMEOUT: int = 10
    WORKERS_TABLE: str = "travailleurs"

    AUTH_PATH: str = "/api/v1/auth"
    HOME_PATH: str = "/api/v1/home"
    ADD_WORKER_PATH: str = "/api/v1/add-worker"
    WORKER_LIST_PATH: str = "/api/v1/worker-list"

    NOTIFICATION_TTL_SECONDS: float = 5.0

    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    model_config = {
        "env_file": _ENV_FILE,
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


settings = Settings()
