from typing import Optional


class RequestValidationFailed(Exception):
    """Request body broke a field rule; carries the first violation only."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadIdentifier(Exception):
    def __init__(self, raw: str):
        super().__init__(f"Invalid device ID: {raw!r}")
        self.raw = raw


class NothingToUpdate(ValueError):
    pass


class PersistenceError(Exception):
    """A store operation failed. The message is safe to log, never to return."""


class ApiError(Exception):
    """Error envelope raised from routes and rendered by the app-level handler."""

    def __init__(self, status_code: int, error: str, message: Optional[str] = None, details: Optional[str] = None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.message is not None:
            body["message"] = self.message
        if self.details is not None:
            body["details"] = self.details
        return body
