from __future__ import annotations

from typing import Any


class DonorHubError(Exception):
    """Base typed error for DonorHub.

    `code` is stable for programmatic handling by clients, `message` is
    human-readable and `status_code` is the HTTP status the presentation
    layer renders it with.
    """

    def __init__(
        self,
        *,
        code: str,
        message: str,
        status_code: int = 500,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = int(status_code)
        self.errors = list(errors or [])

    def to_public_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class ValidationError(DonorHubError):
    def __init__(
        self,
        message: str = "Validation error",
        *,
        code: str = "request.validation_error",
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(code=code, message=message, status_code=400, errors=errors)


class AuthenticationError(DonorHubError):
    def __init__(self, message: str = "Not authenticated", *, code: str = "auth.unauthorized"):
        super().__init__(code=code, message=message, status_code=401)


class NotFoundError(DonorHubError):
    def __init__(self, message: str = "Not found", *, code: str = "resource.not_found"):
        super().__init__(code=code, message=message, status_code=404)


class ConflictError(DonorHubError):
    def __init__(self, message: str = "Conflict", *, code: str = "request.conflict"):
        super().__init__(code=code, message=message, status_code=409)
