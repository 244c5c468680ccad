"""Salesforce REST request pipeline: auth, request building and pagination."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sfconnect")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "unknown"

from .auth import get_access_token
from .config import JwtCredentials, OAuth2Credentials, SFConfig
from .exceptions import (
    InvalidConfigError,
    InvalidTokenUrlError,
    MissingCredentialsError,
    PageFieldError,
    SalesforceAPIError,
    SFConnectError,
    UnsupportedAuthenticationError,
)
from .host import EnvHost, HostContext
from .options import sobject_options, sort_options
from .pagination import api_request_all_items
from .request import RequestBuilder, RequestSpec

__all__ = [
    "EnvHost",
    "HostContext",
    "InvalidConfigError",
    "InvalidTokenUrlError",
    "JwtCredentials",
    "MissingCredentialsError",
    "OAuth2Credentials",
    "PageFieldError",
    "RequestBuilder",
    "RequestSpec",
    "SFConfig",
    "SFConnectError",
    "SalesforceAPIError",
    "UnsupportedAuthenticationError",
    "api_request_all_items",
    "get_access_token",
    "sobject_options",
    "sort_options",
]
