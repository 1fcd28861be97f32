from pathlib import Path
from pydantic_settings import BaseSettings

BASE_DIR = Path(__file__).resolve().parent.parent

class Settings(BaseSettings):
    ENVIRONMENT: str = "development"
    # "sqlite" keeps accounts and products in SQLITE_DB_PATH, "firebase" talks to the hosted project
    REMOTE_BACKEND: str = "sqlite"
    SQLITE_DB_PATH: str = str(BASE_DIR / "data" / "store.db")
    FIREBASE_PROJECT_ID: str = ""
    FIREBASE_API_KEY: str = ""
    # "sqlite" survives restarts, "memory" does not
    LOCAL_STORAGE_BACKEND: str = "sqlite"
    LOCAL_STORAGE_PATH: str = str(BASE_DIR / "data" / "local.db")
    RESEND_API_KEY: str = ""
    CONTACT_SENDER: str = "Dorodango ReFashion <onboarding@resend.dev>"
    CONTACT_RECIPIENT: str = "dorodango.org@gmail.com"
    SESSION_COOKIE_SAMESITE: str = "strict"
    SESSION_MAX_AGE: int = 60 * 60 * 24 * 7
    REMOTE_WRITE_ATTEMPTS: int = 3
    REMOTE_WRITE_BACKOFF: float = 0.5
    PRODUCT_SYNC_POLICY: str = "append_missing"
    AUTO_MIGRATE: bool = False
    CHECKOUT_DELAY_SECONDS: float = 2.0
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def cookie_secure(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings() #type: ignore
