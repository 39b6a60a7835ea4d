"""Exception hierarchy for Krystal Cloud API failures.

Each error carries a machine-readable ``kind`` and a ``user_message()`` with a
suggested remediation, so the CLI can print both.
"""
from __future__ import annotations

import httpx


class KrystalApiError(Exception):
    kind = "error"

    @property
    def is_retryable(self) -> bool:
        return False

    @property
    def is_auth_error(self) -> bool:
        return False

    @property
    def requires_payment(self) -> bool:
        return False

    def user_message(self) -> str:
        return str(self)


class RequestError(KrystalApiError):
    """HTTP request failed before a response was received."""

    kind = "request"

    def __init__(self, cause: httpx.HTTPError):
        super().__init__(f"HTTP request failed: {cause}")
        self.cause = cause

    @property
    def is_timeout(self) -> bool:
        return isinstance(self.cause, httpx.TimeoutException)

    @property
    def is_connect(self) -> bool:
        return isinstance(self.cause, httpx.ConnectError)

    @property
    def is_retryable(self) -> bool:
        return True

    def user_message(self) -> str:
        if self.is_timeout:
            return "Request timed out. Please try again or check your internet connection."
        if self.is_connect:
            return "Could not connect to the API. Please check your internet connection."
        return str(self)


class ApiError(KrystalApiError):
    kind = "api"

    def __init__(self, status: int, message: str):
        super().__init__(f"API returned error: {status} - {message}")
        self.status = status
        self.message = message

    @property
    def is_retryable(self) -> bool:
        return 500 <= self.status <= 599


class AuthError(KrystalApiError):
    kind = "auth"

    def __init__(self) -> None:
        super().__init__("Authentication failed: Missing or invalid API key")

    @property
    def is_auth_error(self) -> bool:
        return True

    def user_message(self) -> str:
        return "Authentication failed. Please check your API key is correct and has proper permissions."


class PaymentRequiredError(KrystalApiError):
    kind = "payment_required"

    def __init__(self) -> None:
        super().__init__("Payment required: No credit left")

    @property
    def requires_payment(self) -> bool:
        return True

    def user_message(self) -> str:
        return "Your account has no remaining credits. Please top up your balance to continue."


class InvalidParamsError(KrystalApiError):
    kind = "invalid_params"

    def __init__(self, message: str):
        super().__init__(f"Invalid parameters: {message}")
        self.message = message

    def user_message(self) -> str:
        return f"Invalid request parameters: {self.message}"


class UrlError(KrystalApiError):
    kind = "url"

    def __init__(self, message: str):
        super().__init__(f"URL parsing error: {message}")


class JsonError(KrystalApiError):
    kind = "json"

    def __init__(self, message: str):
        super().__init__(f"JSON error: {message}")

    def user_message(self) -> str:
        return f"{self} The API response did not match the expected format."


class InvalidResponseError(JsonError):
    """A list of records was required but the response held none."""

    kind = "invalid_response"


class MissingApiKeyError(KrystalApiError):
    kind = "env"

    def __init__(self, variable: str):
        super().__init__(f"Environment variable error: {variable} is not set")
        self.variable = variable

    def user_message(self) -> str:
        return f"No API key found. Pass --api-key or set the {self.variable} environment variable."
