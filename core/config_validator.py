# core/config_validator.py

from typing import List
from core.config import settings
from core.logging_config import logger


def validate_required_config() -> List[str]:
    """
    Validate that all required environment variables are set.
    Returns list of missing required variables.
    """
    missing = []

    if not settings.SUPABASE_URL:
        missing.append("SUPABASE_URL")
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        missing.append("SUPABASE_SERVICE_ROLE_KEY")

    return missing


def validate_optional_config() -> List[str]:
    """
    Validate optional but recommended configuration.
    Returns list of problems (warnings only).
    """
    warnings = []

    if settings.CACHE_STORE not in ("memory", "file"):
        warnings.append(f"CACHE_STORE={settings.CACHE_STORE!r} (expected 'memory' or 'file')")
    if settings.CACHE_MAX_KEYS < 1:
        warnings.append("CACHE_MAX_KEYS should be at least 1")
    if settings.CACHE_TTL_SECONDS <= 0:
        warnings.append("CACHE_TTL_SECONDS should be positive; every entry expires immediately")
    if not settings.DATA_VISIBILITY_UNMAPPED_FIELDS_VISIBLE:
        logger.info("Fields outside any data category are hidden from editor/viewer")

    return warnings


def validate_config_on_startup():
    """
    Validate configuration on application startup.
    Raises RuntimeError if critical config is missing in production;
    other environments only log it so local runs and tests can start.
    """
    missing_required = validate_required_config()
    missing_optional = validate_optional_config()

    if missing_required:
        error_msg = f"Missing required environment variables: {', '.join(missing_required)}"
        if settings.ENV == "production":
            logger.error(error_msg)
            raise RuntimeError(error_msg)
        logger.warning(error_msg)

    for warning in missing_optional:
        logger.warning(f"Configuration warning: {warning}")

    logger.info("Configuration validation passed")
