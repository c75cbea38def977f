from pydantic_settings import BaseSettings
from typing import List, Any
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


def parse_roles(v: str) -> List[str]:
    """Parse a comma-separated role list: student,teacher"""
    if not v:
        return []
    return [role.strip().lower() for role in v.split(',') if role.strip()]


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "School CBT Portal"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str
    API_PREFIX: str = "/api"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_ECHO: bool = False

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days, matches the session cookie
    BCRYPT_ROUNDS: int = 12  # 4 for dev (fast), 12 for prod (secure)

    SESSION_COOKIE_NAME: str = "cbt_session"
    SESSION_COOKIE_SECURE: bool = False
    SESSION_COOKIE_SAMESITE: str = "lax"

    # Admins are provisioned by the seed command, not by self-signup
    SIGNUP_ALLOWED_ROLES_STR: str = "student,teacher"

    @property
    def SIGNUP_ALLOWED_ROLES(self) -> List[str]:
        return parse_roles(self.SIGNUP_ALLOWED_ROLES_STR)

    # ==========================================
    # CORS
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:5173,http://localhost:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/cbt.log"

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 120
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    AUTH_RATE_LIMIT: str = "10/minute"

    # ==========================================
    # Test Codes
    # ==========================================
    TEST_CODE_LENGTH: int = 6
    MAX_CODES_PER_BATCH: int = 500
    MAX_SECURITY_VIOLATIONS: int = 3

    # ==========================================
    # Uploads
    # ==========================================
    MAX_REQUEST_SIZE_MB: int = 10

    # ==========================================
    # Seed
    # ==========================================
    DEFAULT_ADMIN_EMAIL: str = "admin@school.edu.ng"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"
    DEFAULT_ADMIN_NAME: str = "System Administrator"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
