import os
from dataclasses import dataclass

# Hard ceiling on residents per facility.
MAX_RESIDENTS = 60


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


@dataclass
class Settings:
    APP_NAME: str = os.getenv("APP_NAME", "CareStock")
    ENV: str = os.getenv("CARESTOCK_ENV", "dev").lower()  # dev|stage|prod
    DEBUG: bool = os.getenv("DEBUG", "").lower() in {"1", "true", "yes"} or os.getenv("CARESTOCK_ENV", "dev").lower() != "prod"
    # In-memory by default; state lives as long as the process
    DATABASE_URL: str = os.getenv("CARESTOCK_DATABASE_URL", "sqlite://")
    MAX_RESIDENTS: int = _env_int("CARESTOCK_MAX_RESIDENTS", MAX_RESIDENTS)
    HISTORY_MONTHS: int = _env_int("CARESTOCK_HISTORY_MONTHS", 12)
    DEFAULT_RESIDENT_NAME: str = os.getenv("CARESTOCK_DEFAULT_RESIDENT", "Resident 1")

    def __post_init__(self):
        self.ENV = (self.ENV or "dev").lower()
        self.MAX_RESIDENTS = min(MAX_RESIDENTS, max(1, int(self.MAX_RESIDENTS)))
        self.HISTORY_MONTHS = max(1, int(self.HISTORY_MONTHS))
        self.DEFAULT_RESIDENT_NAME = self.DEFAULT_RESIDENT_NAME.strip() or "Resident 1"


# default settings; tests build their own
settings = Settings()
