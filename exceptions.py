from typing import Any, Mapping, Optional


class FitcoachError(Exception):
    """Base class for errors surfaced to the UI.

    Attributes:
        message: human-readable message (what the toast shows)
        details: optional mapping with extra context (field errors, server payload)
        code: optional machine-readable error code
        http_status: HTTP status code when the error came from the API
    """

    http_status: Optional[int] = None

    def __init__(
        self,
        message: str = "Unexpected error",
        details: Optional[Mapping[str, Any]] = None,
        code: Optional[str] = None,
        http_status: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code
        if http_status is not None:
            self.http_status = http_status

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.http_status is not None:
            payload["status"] = self.http_status
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class ApiError(FitcoachError):
    """Raised when a call to the coaching API fails (non-2xx or transport error)."""

    @classmethod
    def from_response(cls, response, default_message: str = "Request failed") -> "ApiError":
        """Build the right subclass from a `requests.Response`.

        The backend reports validation problems as `{"message": ...}`; when that
        field is present it wins over the generic message.
        """
        status = response.status_code
        body: Any = None
        try:
            body = response.json()
        except ValueError:
            body = None

        message = default_message
        if isinstance(body, dict):
            server_message = body.get("message")
            if isinstance(server_message, list):
                server_message = "; ".join(str(m) for m in server_message)
            if server_message:
                message = str(server_message)

        error_cls: type = ApiError
        if status == 401:
            error_cls = UnauthorizedError
        elif status == 404:
            error_cls = NotFoundError

        details = body if isinstance(body, dict) else None
        return error_cls(message, details=details, http_status=status)


class UnauthorizedError(ApiError):
    """Raised on 401; the cached session token is no longer valid."""

    http_status = 401

    def __init__(self, message: str = "Session expired", **kwargs):
        super().__init__(message, **kwargs)


class NotFoundError(ApiError):
    """Raised when the API answers 404 for a resource."""

    http_status = 404

    def __init__(self, message: str = "Not found", **kwargs):
        super().__init__(message, **kwargs)


class FormValidationError(FitcoachError):
    """Raised when a form value is rejected before any request is sent."""

    def __init__(self, message: str = "Invalid input", field: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
