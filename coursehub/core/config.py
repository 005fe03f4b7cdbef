import os
from dotenv import load_dotenv
from typing import Optional, List

# Load .env file from the package directory (parent of 'core')
dotenv_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env')
load_dotenv(dotenv_path)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    PROJECT_NAME: str = "CourseHub API"
    API_V1_STR: str = "/api/v1"

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./coursehub.db")
    # Dev mode only; production schemas are managed outside the app
    CREATE_TABLES_ON_STARTUP: bool = _env_bool("CREATE_TABLES_ON_STARTUP", "true")

    # Firebase
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")

    # CORS
    CORS_ALLOWED_ORIGINS_STR: str = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Media
    UPLOADS_DIR: str = os.getenv("UPLOADS_DIR", os.path.abspath("uploads"))
    MEDIA_CHUNK_SIZE: int = int(os.getenv("MEDIA_CHUNK_SIZE", "65536"))

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(type(self), key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)

    @property
    def CORS_ALLOWED_ORIGINS(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ALLOWED_ORIGINS_STR.split(',') if origin.strip()]


settings = Settings()

# Example usage:
# from coursehub.core.config import settings
# media_root = settings.UPLOADS_DIR
