from typing import Optional

from supabase import PostgrestAPIError

# Postgres unique constraint violation
UNIQUE_VIOLATION = "23505"


class StudyTrackerError(Exception):
    """Base class for errors surfaced to API callers"""
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class AuthenticationError(StudyTrackerError):
    status_code = 401


class ContentValidationError(StudyTrackerError):
    status_code = 400


class NotFoundError(StudyTrackerError):
    status_code = 404


class ConflictError(StudyTrackerError):
    status_code = 409


class CalendarError(StudyTrackerError):
    status_code = 502

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        if status_code is not None:
            self.status_code = status_code


def is_duplicate_error(error: Exception) -> bool:
    return isinstance(error, PostgrestAPIError) and error.code == UNIQUE_VIOLATION
