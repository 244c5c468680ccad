"""JWT bearer flow: sign an assertion and exchange it for an access token.

See https://help.salesforce.com/articleView?id=remoteaccess_oauth_jwt_flow.htm
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import jwt

from .config import JwtCredentials
from .host import HostContext, RequestSpec

_logger = logging.getLogger(__name__)

AUTH_URLS = {
    "sandbox": "https://test.salesforce.com",
    "production": "https://login.salesforce.com",
}

ASSERTION_LIFETIME = 3 * 60
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"


def auth_url_for(credentials: JwtCredentials) -> str:
    return AUTH_URLS["sandbox"] if credentials.is_sandbox else AUTH_URLS["production"]


def build_assertion(credentials: JwtCredentials, now: Optional[int] = None) -> str:
    """Return an RS256-signed assertion valid for three minutes from ``now``."""
    issued = int(time.time()) if now is None else now
    claims = {
        "iss": credentials.client_id,
        "sub": credentials.username,
        "aud": auth_url_for(credentials),
        "exp": issued + ASSERTION_LIFETIME,
    }
    return jwt.encode(claims, credentials.private_key, algorithm="RS256", headers={"alg": "RS256"})


def get_access_token(host: HostContext, credentials: JwtCredentials) -> Dict[str, Any]:
    """Exchange a fresh assertion for ``{"instance_url", "access_token", ...}``.

    Transport and HTTP errors from the token endpoint propagate unchanged.
    """
    auth_url = auth_url_for(credentials)
    spec = RequestSpec(
        method="POST",
        uri=f"{auth_url}/services/oauth2/token",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        form={
            "grant_type": JWT_BEARER_GRANT,
            "assertion": build_assertion(credentials),
        },
    )
    _logger.debug("Requesting JWT bearer token from %s", spec.uri)
    return host.http_request(spec)
