from pydantic_settings import BaseSettings
from typing import List, Any, Dict
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


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "CampusDesk"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False

    # ==========================================
    # Security
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720  # one working day
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    BCRYPT_ROUNDS: int = 12  # 4 for dev (fast), 12 for prod (secure)

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 120
    RATE_LIMIT_LOGIN_PER_MINUTE: int = 5
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/campusdesk.log"

    # ==========================================
    # Institution (printed on the no-due certificate)
    # ==========================================
    INSTITUTION_NAME: str = "Engineering College"
    INSTITUTION_SHORT_NAME: str = "EC"
    INSTITUTION_AFFILIATION: str = "Approved by AICTE, Affiliated to the State Technological University"
    INSTITUTION_ADDRESS: str = ""
    INSTITUTION_LOGO_URL: str = ""
    NO_DUE_REF_PREFIX: str = "EC"

    # ==========================================
    # No-due workflow
    # ==========================================
    NO_DUE_RECENT_LIMIT: int = 50

    # ==========================================
    # Faculty workload thresholds
    # ==========================================
    WORKLOAD_MAX_TEACHING_HOURS: float = 20
    WORKLOAD_MAX_LAB_SESSIONS: int = 4
    WORKLOAD_MAX_MENTEES: int = 25
    WORKLOAD_MAX_MEETINGS_PER_WEEK: int = 5

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    def is_dev_mode(self) -> bool:
        """Check if running in development mode"""
        return self.ENVIRONMENT == "development" or self.DEBUG

    def get_workload_thresholds(self) -> Dict[str, float]:
        """Workload thresholds keyed the way the workload service reads them"""
        return {
            "max_teaching_hours": self.WORKLOAD_MAX_TEACHING_HOURS,
            "max_lab_sessions": self.WORKLOAD_MAX_LAB_SESSIONS,
            "max_mentees": self.WORKLOAD_MAX_MENTEES,
            "max_meetings_per_week": self.WORKLOAD_MAX_MEETINGS_PER_WEEK,
        }

    def validate_critical(self) -> List[str]:
        """
        Return a list of problems that must stop the app from starting.

        Called from the lifespan hook; empty list means the config is usable.
        """
        problems = []
        if self.ENVIRONMENT == "production":
            if self.DEBUG:
                problems.append("DEBUG must be false in production")
            if len(self.JWT_SECRET_KEY) < 32:
                problems.append("JWT_SECRET_KEY must be at least 32 characters in production")
            if self.DATABASE_URL.startswith("sqlite"):
                problems.append("SQLite is not supported in production")
        if self.WORKLOAD_MAX_TEACHING_HOURS <= 0 or self.WORKLOAD_MAX_LAB_SESSIONS <= 0:
            problems.append("Workload thresholds must be positive")
        if self.WORKLOAD_MAX_MENTEES <= 0 or self.WORKLOAD_MAX_MEETINGS_PER_WEEK <= 0:
            problems.append("Workload thresholds must be positive")
        return problems


# Create settings instance
settings = Settings()
