# core/errors.py

from fastapi import HTTPException


# ============================================================
# Domain errors: data visibility
# ============================================================

class DataVisibilityError(Exception):
    """Base class for role data visibility failures."""


class AuthorizationError(DataVisibilityError):
    """Caller is not allowed to perform the requested change."""


class PermissionModificationError(AuthorizationError):
    """Raised when someone tries to change owner or admin visibility."""

    def __init__(self, role: str):
        self.role = role
        super().__init__(f"Cannot modify {role} permissions: owner and admin always see all data")


class PermissionStorageError(DataVisibilityError):
    """Reading or writing role_data_permissions failed."""

    def __init__(self, message: str, cause: Exception = None):
        self.cause = cause
        super().__init__(message)


# ============================================================
# Supabase error helpers
# ============================================================

def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1: Supabase Auth / GoTrue / PostgREST errors carry .message
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: Errors with args (common)
    if getattr(error, "args", None):
        return str(error.args[0])

    # Case 3: Plain string fallback
    return str(error) or "Unknown Supabase error"


def handle_supabase_error(error: Exception, operation: str = "Database operation", status_code: int = 500) -> HTTPException:
    """
    Handle Supabase errors with consistent formatting.
    Returns HTTPException (doesn't raise) so caller can customize or re-raise.

    Args:
        error: The exception that occurred
        operation: Description of what operation failed (e.g., "Failed to update permissions")
        status_code: HTTP status code (default 500)

    Returns:
        HTTPException with standardized error message
    """
    from core.logging_config import logger

    source = error.cause if isinstance(error, PermissionStorageError) and error.cause else error
    error_detail = extract_supabase_error(source)
    logger.error(f"{operation}: {error_detail}")

    # Provide user-friendly messages for common errors
    error_lower = error_detail.lower()
    if "duplicate" in error_lower or "unique" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Record already exists")
    elif "foreign key" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Invalid reference")
    elif "not configured" in error_lower:
        return HTTPException(status_code=500, detail="Supabase client not configured")
    else:
        return HTTPException(status_code=status_code, detail=f"{operation} failed")
