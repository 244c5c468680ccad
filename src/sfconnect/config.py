from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .exceptions import InvalidConfigError, MissingCredentialsError

JWT_CREDENTIALS = "salesforceJwtApi"
OAUTH2_CREDENTIALS = "salesforceOAuth2Api"

AUTH_JWT = "jwt"
AUTH_OAUTH2 = "oAuth2"


# ----------------------------------------------------------------------
# Runtime configuration
# ----------------------------------------------------------------------
@dataclass
class SFConfig:
    """Settings for the request pipeline."""

    # Which credential variant to use: "oAuth2" (web server flow) or "jwt"
    authentication: str = AUTH_OAUTH2

    # Transport timeout in seconds, applied unless a call overrides it
    timeout: float = 30.0

    @classmethod
    def from_env(cls) -> SFConfig:
        """Load configuration from environment variables."""
        raw_timeout = os.getenv("SF_TIMEOUT", "30")
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise InvalidConfigError(
                "SF_TIMEOUT", f"expected seconds, got {raw_timeout!r}"
            ) from None
        return cls(
            authentication=os.getenv("SF_AUTHENTICATION", AUTH_OAUTH2),
            timeout=timeout,
        )


# ----------------------------------------------------------------------
# Credential records
# ----------------------------------------------------------------------
def _require(values: dict[str, Optional[str]]) -> None:
    missing = [k for k, v in values.items() if not v]
    if missing:
        raise MissingCredentialsError(missing)


@dataclass(frozen=True)
class JwtCredentials:
    """Connected-app credentials for the JWT bearer flow."""

    client_id: str
    username: str
    private_key: str
    environment: str = "production"

    @property
    def is_sandbox(self) -> bool:
        return self.environment == "sandbox"

    @classmethod
    def from_env(cls) -> JwtCredentials:
        private_key = os.getenv("SF_PRIVATE_KEY")
        key_file = os.getenv("SF_PRIVATE_KEY_FILE")
        if not private_key and key_file:
            try:
                private_key = Path(key_file).expanduser().read_text()
            except OSError as e:
                raise InvalidConfigError(
                    "SF_PRIVATE_KEY_FILE", f"cannot read {key_file!r} ({e.strerror or e})"
                ) from e

        values = {
            "SF_CLIENT_ID": os.getenv("SF_CLIENT_ID"),
            "SF_USERNAME": os.getenv("SF_USERNAME"),
            "SF_PRIVATE_KEY": private_key,
        }
        _require(values)
        return cls(
            client_id=values["SF_CLIENT_ID"] or "",
            username=values["SF_USERNAME"] or "",
            private_key=private_key or "",
            environment=os.getenv("SF_ENVIRONMENT", "production"),
        )


@dataclass(frozen=True)
class OAuth2Credentials:
    """Web server flow credentials; tokens are issued and refreshed elsewhere."""

    access_token_url: str
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None

    @classmethod
    def from_env(cls) -> OAuth2Credentials:
        values = {
            "SF_ACCESS_TOKEN_URL": os.getenv("SF_ACCESS_TOKEN_URL"),
            "SF_ACCESS_TOKEN": os.getenv("SF_ACCESS_TOKEN"),
        }
        _require(values)
        return cls(
            access_token_url=values["SF_ACCESS_TOKEN_URL"] or "",
            client_id=os.getenv("SF_CLIENT_ID"),
            client_secret=os.getenv("SF_CLIENT_SECRET"),
            access_token=values["SF_ACCESS_TOKEN"],
            refresh_token=os.getenv("SF_REFRESH_TOKEN"),
        )
