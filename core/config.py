from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Booth API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # Frontend Domains
    # -------------------------------------------------
    FRONTEND_DOMAIN: Optional[str] = None

    BOOTH_DOMAINS: List[str] = [
        "https://booth.app",
        "https://www.booth.app",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # -------------------------------------------------
    # Local Response Cache
    # -------------------------------------------------
    CACHE_KEY_PREFIX: str = Field("tsm_cache_", description="Namespace for cache keys inside the shared store")
    CACHE_TTL_SECONDS: int = Field(300, description="Entries older than this are treated as absent (default: 5 minutes)")
    CACHE_MAX_KEYS: int = Field(50, description="Maximum number of cache entries kept after a write")

    # "memory" keeps entries for the process lifetime, "file" persists them as JSON
    CACHE_STORE: str = "memory"
    CACHE_FILE_PATH: str = ".booth_cache.json"
    CACHE_MAX_BYTES: Optional[int] = Field(None, description="Store quota in characters; unlimited when unset")

    # -------------------------------------------------
    # Data Visibility
    # -------------------------------------------------
    # Fields that belong to no data category are shown unless this is False
    DATA_VISIBILITY_UNMAPPED_FIELDS_VISIBLE: bool = True

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = []

# 1) add custom frontend domain
if settings.FRONTEND_DOMAIN:
    domain = settings.FRONTEND_DOMAIN
    if not domain.startswith("http"):
        domain = f"https://{domain}"
    cors_origins.append(domain.rstrip("/"))

# 2) add Booth domains
cors_origins.extend([d.rstrip("/") for d in settings.BOOTH_DOMAINS])

# 3) remove duplicates
settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))
