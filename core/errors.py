# core/errors.py

from fastapi import HTTPException

from core.logging_config import logger


def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors (APIError.message)
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1: Supabase Auth / PostgREST errors
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: Supabase errors with args (common)
    if getattr(error, "args", None):
        return str(error.args[0])

    # Case 3: Plain string fallback
    return str(error) or "Unknown Supabase error"


def handle_supabase_error(
    error: Exception,
    operation: str = "Database operation",
    status_code: int = 500,
) -> HTTPException:
    """
    Handle Supabase errors with consistent formatting.
    Returns HTTPException (doesn't raise) so caller can customize or re-raise.

    The raw store message is logged, never returned to the caller.

    Args:
        error: The exception that occurred
        operation: Description of what operation failed (e.g., "Failed to create unit")
        status_code: HTTP status code (default 500)
    """
    error_detail = extract_supabase_error(error)
    logger.error(f"{operation}: {error_detail}")

    error_lower = error_detail.lower()
    if "duplicate" in error_lower or "unique" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Record already exists")
    elif "foreign key" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Invalid reference")
    elif "not found" in error_lower or "does not exist" in error_lower:
        return HTTPException(status_code=404, detail=f"{operation}: Resource not found")
    elif operation.lower().startswith(("failed", "unable")):
        return HTTPException(status_code=status_code, detail=operation)
    else:
        return HTTPException(status_code=status_code, detail=f"{operation} failed")


def supabase_error(error: Exception, operation: str = "Database operation"):
    """
    Convert Supabase / database errors into clean HTTPExceptions.
    Always raises.
    """
    raise handle_supabase_error(error, operation)


def require_client(client):
    """Raise 500 when the Supabase client could not be configured."""
    if client is None:
        raise HTTPException(500, "Supabase client not configured")
    return client
