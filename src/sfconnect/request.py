"""Request Builder: turns an endpoint call into a versioned, authenticated request.

Two authentication paths are supported:

* ``jwt``: a fresh access token is obtained through the JWT bearer flow for
  every call and the request is sent against the returned instance URL.
* ``oAuth2``: the tenant host is derived from the stored token URL and the
  request is handed to the host's OAuth2-aware transport, which owns the
  token lifecycle.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, Optional

import requests

from .auth import get_access_token
from .config import AUTH_JWT, AUTH_OAUTH2, JWT_CREDENTIALS, OAUTH2_CREDENTIALS
from .exceptions import (
    InvalidTokenUrlError,
    SalesforceAPIError,
    UnsupportedAuthenticationError,
    structured_error_message,
)
from .host import HostContext, RequestSpec

_logger = logging.getLogger(__name__)

API_VERSION_PATH = "/services/data/v39.0"

_SUBDOMAIN_RE = re.compile(r"https://(.+)\.salesforce\.com")

# Transport options a caller may not override through ``option``
_RESERVED_OPTIONS = frozenset(
    {"method", "url", "uri", "headers", "json", "data", "params", "body", "qs", "form"}
)


def build_request_spec(
    method: str,
    endpoint: str,
    body: Optional[Any],
    qs: Optional[Dict[str, Any]],
    instance_url: str,
    option: Optional[Dict[str, Any]] = None,
) -> RequestSpec:
    """Build a JSON request against ``instance_url`` + API version + ``endpoint``.

    ``GET`` never carries a body, whatever was passed in.
    """
    method = method.upper()
    if method == "GET":
        payload = None
    else:
        payload = {} if body is None else body

    extra = {k: v for k, v in (option or {}).items() if k not in _RESERVED_OPTIONS}
    return RequestSpec(
        method=method,
        uri=f"{instance_url}{API_VERSION_PATH}{endpoint}",
        headers={"Content-Type": "application/json"},
        body=payload,
        qs=dict(qs or {}),
        extra=extra,
    )


def subdomain_from_token_url(access_token_url: str) -> str:
    """Return ``https://<subdomain>.salesforce.com`` for a stored token URL."""
    match = _SUBDOMAIN_RE.search(access_token_url or "")
    if not match:
        raise InvalidTokenUrlError(access_token_url)
    return f"https://{match.group(1)}.salesforce.com"


class RequestBuilder:
    """Builds and sends REST calls using the host's credentials and transport."""

    def __init__(self, host: HostContext, authentication: Optional[str] = None) -> None:
        self.host = host
        self.authentication = authentication or host.get_parameter("authentication", AUTH_OAUTH2)
        if self.authentication not in (AUTH_JWT, AUTH_OAUTH2):
            raise UnsupportedAuthenticationError(self.authentication)

    def api_request(
        self,
        method: str,
        endpoint: str,
        body: Optional[Any] = None,
        qs: Optional[Dict[str, Any]] = None,
        uri: Optional[str] = None,
        option: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send one request and return the decoded JSON response.

        ``uri`` replaces ``endpoint`` when given (used for follow-up pages).
        Error bodies shaped ``[{"message": ...}]`` are raised as
        :class:`SalesforceAPIError`; other transport errors propagate as-is.
        """
        target = uri or endpoint

        if self.authentication == AUTH_JWT:
            credentials = self.host.get_credentials(JWT_CREDENTIALS)
            # Token exchange errors propagate without rewriting
            token = get_access_token(self.host, credentials)
            spec = build_request_spec(method, target, body, qs, token["instance_url"], option)
            spec = spec.with_header("Authorization", f"Bearer {token['access_token']}")
            _logger.debug("%s %s (jwt)", spec.method, spec.uri)
            return self._send(lambda: self.host.http_request(spec))

        credentials = self.host.get_credentials(OAUTH2_CREDENTIALS)
        base_url = subdomain_from_token_url(credentials.access_token_url)
        spec = build_request_spec(method, target, body, qs, base_url, option)
        _logger.debug("%s %s (oAuth2)", spec.method, spec.uri)
        return self._send(lambda: self.host.http_request_oauth2(OAUTH2_CREDENTIALS, spec))

    @staticmethod
    def _send(dispatch: Callable[[], Any]) -> Any:
        try:
            return dispatch()
        except requests.RequestException as e:
            message = structured_error_message(e)
            if message is None:
                raise
            status = e.response.status_code if e.response is not None else None
            raise SalesforceAPIError(status, message) from e
