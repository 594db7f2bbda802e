from typing import Any, Dict, List, Optional


class EventError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "status_code": self.status_code,
        }


class ConfigError(EventError):
    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message, status_code)


class EventValidationError(EventError):
    def __init__(self, message: str, status_code: int = 422):
        super().__init__(message, status_code)


class KlaviyoAPIError(EventError):
    """
    Raised by the Klaviyo client for transport failures and non-2xx replies.
    errors: the JSON:API `errors` array from the response body, when present.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message, status_code)
        self.errors = errors or []


class SubmissionError(EventError):
    def __init__(
        self,
        message: str,
        status_code: int = 502,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message, status_code)
        self.errors = errors or []

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["errors"] = self.errors
        return out
