from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Application Settings
    PROJECT_NAME: str = "Course Platform Backend"
    DEBUG: bool = False
    # "development" exposes raw error detail in 500 responses
    ENVIRONMENT: str = "development"
    PORT: int = 5000

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./course_platform.db"

    # JWT Settings
    SECRET_KEY: str = "your-super-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Email Settings (OTP delivery and course approval notices)
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_START_TLS: bool = True
    EMAIL_FROM: str | None = None
    EMAIL_TIMEOUT_SECONDS: float = 25.0

    # Per-socket send deadline for realtime broadcasts
    BROADCAST_TIMEOUT_SECONDS: float = 5.0

    # OTP Settings
    OTP_EXPIRE_MINUTES: int = 5
    OTP_LENGTH: int = 6

    ACADEMY_NAME: str = "Talimul Islam Academy"
    COURSE_URL: str = "https://your-course-website.com/practical-ibarat"

    # Admin routes: X-Admin-Key must match the primary key or one of the additional (rotated) keys
    ADMIN_API_KEY: str | None = None
    ADMIN_API_ADDITIONAL_KEYS: str | None = None

    CORS_ORIGINS: str = "*"

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def mail_sender(self) -> str:
        return self.EMAIL_FROM or self.SMTP_USERNAME

    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    def _post_init(self):
        # Enforce real secrets in non-debug contexts
        if not self.DEBUG:
            if self.SECRET_KEY.startswith("your-super-secret-key"):
                raise ValueError("SECRET_KEY must be set in environment for non-debug mode")
            if not self.ADMIN_API_KEY:
                raise ValueError("ADMIN_API_KEY must be set in environment for non-debug mode")
        if (self.ADMIN_API_KEY and self.ADMIN_API_KEY.lower() in {"change-me", "changeme", "default", "secret"}) and not self.DEBUG:
            raise ValueError("Insecure ADMIN_API_KEY value detected; change it")
        if self.OTP_LENGTH < 4:
            raise ValueError("OTP_LENGTH must be at least 4")

settings = Settings()
settings._post_init()
