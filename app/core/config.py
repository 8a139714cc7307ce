# app/core/config.py
import os
from dotenv import load_dotenv
from typing import List
from pydantic import BaseModel, Field

load_dotenv()

def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}

def _normalize(url: str) -> str:
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url

def _default_database_url() -> str:
    raw = os.getenv("DATABASE_URL")
    if raw and raw.strip():
        return _normalize(raw.strip())
    data_dir = os.path.abspath(os.getenv("DATA_DIR", "./data"))
    os.makedirs(data_dir, exist_ok=True)
    return f"sqlite:///{os.path.join(data_dir, 'commerce.db')}"

class Settings(BaseModel):
    APP_ENV: str = Field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    LOG_LEVEL: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    DATABASE_URL: str = Field(default_factory=_default_database_url)

    SECRET_KEY: str = Field(default_factory=lambda: os.getenv("SECRET_KEY", "CHANGE_ME_SUPER_SECRET"))
    ALGORITHM: str = Field(default_factory=lambda: os.getenv("JWT_ALGORITHM", "HS256"))
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default_factory=lambda: int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440")))
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(default_factory=lambda: int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7")))
    REFRESH_TOKEN_BYTES: int = Field(default_factory=lambda: int(os.getenv("REFRESH_TOKEN_BYTES", "32")))
    # false: every device keeps its own refresh token until the next rotation
    SINGLE_SESSION_PER_USER: bool = Field(default_factory=lambda: _env_bool("SINGLE_SESSION_PER_USER", "false"))

    CORS_ORIGIN: str = Field(default_factory=lambda: os.getenv("CORS_ORIGIN", ""))
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(default_factory=lambda: _env_bool("RUN_MIGRATIONS_ON_STARTUP", "true"))
    SEED_DEMO_DATA: bool = Field(default_factory=lambda: _env_bool("SEED_DEMO_DATA", "true"))

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"

    def cors_origins(self) -> List[str]:
        """Allowed CORS origins; everything in development, explicit non-local hosts in production."""
        if not self.is_production:
            return ["*"]
        origins = [o.strip() for o in self.CORS_ORIGIN.split(",") if o.strip()]
        allowed = [o for o in origins if "localhost" not in o.lower() and "127.0.0.1" not in o]
        if not allowed:
            raise RuntimeError("In production, CORS_ORIGIN must be set and must not include localhost.")
        return allowed

settings = Settings()
