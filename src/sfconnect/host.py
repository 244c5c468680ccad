"""Host capabilities consumed by the request pipeline.

The pipeline never talks to the network or the environment directly; it is
handed a :class:`HostContext` providing plain and OAuth2-aware transports,
credential lookup and parameter lookup. :class:`EnvHost` is the default
implementation, backed by ``requests`` and environment variables.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Protocol

import requests

from .config import (
    JWT_CREDENTIALS,
    OAUTH2_CREDENTIALS,
    JwtCredentials,
    OAuth2Credentials,
    SFConfig,
)
from .exceptions import SFConnectError
from .logging_config import redact

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestSpec:
    """Everything needed to dispatch one HTTP call.

    ``headers``, ``qs``, ``form`` and ``extra`` are copied into read-only
    mappings. ``body`` is sent as given and is not copied.
    """

    method: str
    uri: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[Any] = None
    qs: Mapping[str, Any] = field(default_factory=dict)
    form: Optional[Mapping[str, Any]] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("headers", "qs", "form", "extra"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, MappingProxyType(dict(value)))

    def with_header(self, name: str, value: str) -> RequestSpec:
        headers = dict(self.headers)
        headers[name] = value
        return replace(self, headers=headers)


class HostContext(Protocol):
    def http_request(self, spec: RequestSpec) -> Any: ...

    def http_request_oauth2(self, credentials_type: str, spec: RequestSpec) -> Any: ...

    def get_credentials(self, credentials_type: str) -> Any: ...

    def get_parameter(self, name: str, default: Any = None) -> Any: ...


# ----------------------------------------------------------------------
# Default host
# ----------------------------------------------------------------------
class EnvHost:
    """Host backed by a ``requests.Session`` and ``SF_*`` environment variables."""

    def __init__(
        self,
        cfg: Optional[SFConfig] = None,
        parameters: Optional[Dict[str, Any]] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.cfg = cfg or SFConfig.from_env()
        self.parameters: Dict[str, Any] = {"authentication": self.cfg.authentication}
        self.parameters.update(parameters or {})
        self.session = session or requests.Session()
        self._oauth2: Optional[OAuth2Credentials] = None

    # --------------------------- Lookups -----------------------------

    def get_parameter(self, name: str, default: Any = None) -> Any:
        return self.parameters.get(name, default)

    def get_credentials(self, credentials_type: str) -> Any:
        if credentials_type == JWT_CREDENTIALS:
            return JwtCredentials.from_env()
        if credentials_type == OAUTH2_CREDENTIALS:
            if self._oauth2 is None:
                self._oauth2 = OAuth2Credentials.from_env()
            return self._oauth2
        raise SFConnectError(f"Unknown credentials type: {credentials_type!r}")

    # --------------------------- Transports --------------------------

    def http_request(self, spec: RequestSpec) -> Any:
        """Send ``spec`` as-is and return the decoded JSON body (``None`` if empty)."""
        r = self._dispatch(spec)
        self._raise_for_status(spec, r)
        return r.json() if r.content else None

    def http_request_oauth2(self, credentials_type: str, spec: RequestSpec) -> Any:
        """Send ``spec`` with the stored OAuth2 token, refreshing once on 401."""
        credentials = self.get_credentials(credentials_type)
        r = self._dispatch(spec.with_header("Authorization", f"Bearer {credentials.access_token}"))

        if r.status_code == 401 and credentials.refresh_token:
            _logger.info("Access token rejected; refreshing via %s", credentials.access_token_url)
            credentials = self._refresh(credentials)
            r = self._dispatch(
                spec.with_header("Authorization", f"Bearer {credentials.access_token}")
            )

        self._raise_for_status(spec, r)
        return r.json() if r.content else None

    # --------------------------- Internal helpers --------------------

    def _dispatch(self, spec: RequestSpec) -> requests.Response:
        kwargs: Dict[str, Any] = {
            "params": dict(spec.qs) or None,
            "headers": dict(spec.headers),
            "timeout": self.cfg.timeout,
        }
        if spec.form is not None:
            kwargs["data"] = dict(spec.form)
        elif spec.body is not None:
            kwargs["json"] = spec.body
        kwargs.update(spec.extra)

        _logger.debug("HTTP %s %s", spec.method, spec.uri)
        return self.session.request(spec.method, spec.uri, **kwargs)

    @staticmethod
    def _raise_for_status(spec: RequestSpec, r: requests.Response) -> None:
        if r.status_code < 400:
            return
        try:
            detail = r.json()
        except ValueError:
            detail = r.text
        _logger.error("HTTP %s error for %s: %s", r.status_code, spec.uri, redact(str(detail)))
        r.raise_for_status()

    def _refresh(self, credentials: OAuth2Credentials) -> OAuth2Credentials:
        """Exchange the refresh token for a new access token (kept in memory only)."""
        spec = RequestSpec(
            method="POST",
            uri=credentials.access_token_url,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            form={
                "grant_type": "refresh_token",
                "client_id": credentials.client_id,
                "client_secret": credentials.client_secret,
                "refresh_token": credentials.refresh_token,
            },
        )
        data = self.http_request(spec)
        refreshed = replace(
            credentials,
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or credentials.refresh_token,
        )
        self._oauth2 = refreshed
        return refreshed
