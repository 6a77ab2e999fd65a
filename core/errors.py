# core/errors.py

from fastapi import HTTPException, status

from core.logging_config import logger


# ============================================================
# Error taxonomy
# ============================================================
# Every failure reaches the caller as one readable `detail` string.
# Nothing here retries; the user may always repeat the action.

class ValidationFailed(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotAuthenticated(HTTPException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class NotPermitted(HTTPException):
    def __init__(self, detail: str = "You do not have permission for this action"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class BackendUnavailable(HTTPException):
    def __init__(self, detail: str = "Backend request failed, please try again"):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors (APIError carries .message / .code)
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    if getattr(error, "message", None):
        return str(error.message)

    if getattr(error, "args", None):
        return str(error.args[0])

    return str(error) or "Unknown Supabase error"


def is_unique_violation(error: Exception) -> bool:
    if getattr(error, "code", None) == "23505":
        return True
    detail = extract_supabase_error(error).lower()
    return "duplicate" in detail or "unique" in detail


def handle_supabase_error(error: Exception, operation: str = "Database operation") -> HTTPException:
    """
    Map a Supabase failure onto the error taxonomy.
    Returns the exception (doesn't raise) so the caller can re-raise it:

        except Exception as e:
            raise handle_supabase_error(e, "Failed to create complaint")
    """
    if isinstance(error, HTTPException):
        return error

    error_detail = extract_supabase_error(error)
    logger.error(f"{operation}: {error_detail}")

    error_lower = error_detail.lower()
    if is_unique_violation(error):
        return ConflictError(f"{operation}: record already exists")
    if "foreign key" in error_lower:
        return ValidationFailed(f"{operation}: invalid reference")
    if "not found" in error_lower or "does not exist" in error_lower:
        return NotFound(f"{operation}: resource not found")
    return BackendUnavailable(f"{operation} failed, please try again")
