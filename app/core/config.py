from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    ENV: str = "dev"  # "dev" or "prod"
    DEBUG: bool = False
    FRONTEND_URL: str = "http://localhost:5173"

    # --- REMOTE SUBMISSION (Apps Script web app) ---
    SUBMISSION_SCRIPT_URL: str | None = None
    SUBMISSION_TIMEOUT_SECONDS: float = 120.0

    # --- UPLOADS ---
    MAX_UPLOAD_BYTES: int = 2 * 1024 * 1024  # photos, signatures, general documents
    MAX_RESEARCH_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # --- PDF ---
    # Leave empty to auto-detect wkhtmltopdf on PATH
    WKHTMLTOPDF_PATH: str | None = None

    # Optional JSON file replacing the built-in step validation table
    FORM_RULES_PATH: str | None = None

    # Optional college instructions PDF appended right behind the form
    INSTRUCTIONS_PDF_PATH: str | None = None

    # --- SESSIONS ---
    # Idle sessions (and their download folders) are purged after this; 0 keeps them forever
    SESSION_TTL_MINUTES: int = 120

    APPLICATION_NO_PREFIX: str = "TRGC"
    COLLEGE_SHORT_NAME: str = "TRGC"

    # --- RATE LIMITING ---
    REDIS_URL: str | None = None
    RATE_LIMIT_ENABLED: bool = True
    UPLOAD_RATE_LIMIT: str = "20/minute"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
