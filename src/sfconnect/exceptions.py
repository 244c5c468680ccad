from __future__ import annotations

from typing import Any, Optional


class SFConnectError(RuntimeError):
    """Base class for sfconnect errors."""


class MissingCredentialsError(SFConnectError):
    """Raised when the required Salesforce env vars are not present."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__("Missing required environment variables: " + ", ".join(missing))


class InvalidConfigError(SFConnectError):
    """Raised when a configuration value is present but unusable."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid {name}: {reason}")


class UnsupportedAuthenticationError(SFConnectError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unsupported authentication: {name!r} (expected 'jwt' or 'oAuth2')")


class InvalidTokenUrlError(SFConnectError):
    """Raised when an access token URL does not point at a salesforce.com host."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Cannot derive Salesforce subdomain from access token URL: {url!r}")


class PageFieldError(SFConnectError):
    """Raised when a page of results lacks the collection field being gathered."""

    def __init__(self, field: str, endpoint: str):
        self.field = field
        self.endpoint = endpoint
        super().__init__(f"Response from {endpoint} has no list field {field!r}")


class SalesforceAPIError(SFConnectError):
    """Structured error returned by the REST API, reduced to status and message."""

    def __init__(self, status_code: Optional[int], message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Salesforce error response [{status_code}]: {message}")


def structured_error_message(exc: BaseException) -> Optional[str]:
    """Return the first ``message`` of an error body shaped ``[{"message": ...}]``.

    Anything else (no response, non-JSON body, other shapes) yields ``None``.
    """
    response = getattr(exc, "response", None)
    if response is None:
        return None
    try:
        body: Any = response.json()
    except ValueError:
        return None
    if isinstance(body, list) and body and isinstance(body[0], dict):
        message = body[0].get("message")
        if message:
            return str(message)
    return None

