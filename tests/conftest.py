import json

import pytest
import requests
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from sfconnect.config import (
    JWT_CREDENTIALS,
    OAUTH2_CREDENTIALS,
    JwtCredentials,
    OAuth2Credentials,
)

TOKEN_URL = "https://acme.salesforce.com/services/oauth2/token"


def make_response(status=200, body=None, url="https://acme.salesforce.com/x"):
    """Build a real requests.Response so raise_for_status() behaves normally."""
    r = requests.Response()
    r.status_code = status
    r._content = b"" if body is None else json.dumps(body).encode()
    r.url = url
    r.headers["Content-Type"] = "application/json"
    return r


def http_error(status, body):
    r = make_response(status, body)
    return requests.HTTPError(f"{status} Error", response=r)


class FakeHost:
    """Records every dispatched RequestSpec and replays canned responses."""

    def __init__(self, responses=None, parameters=None, token=None, credentials=None):
        self.responses = list(responses or [])
        self.parameters = parameters or {}
        self.token = token or {
            "instance_url": "https://na1.salesforce.com",
            "access_token": "00DJWT",
        }
        self.credentials = credentials or {}
        self.calls = []

    def _next(self):
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def http_request(self, spec):
        self.calls.append(("plain", spec))
        if spec.uri.endswith("/services/oauth2/token"):
            if isinstance(self.token, Exception):
                raise self.token
            return self.token
        return self._next()

    def http_request_oauth2(self, credentials_type, spec):
        self.calls.append((credentials_type, spec))
        return self._next()

    def get_credentials(self, credentials_type):
        return self.credentials[credentials_type]

    def get_parameter(self, name, default=None):
        return self.parameters.get(name, default)

    @property
    def api_specs(self):
        return [s for _, s in self.calls if not s.uri.endswith("/services/oauth2/token")]


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_key):
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture(scope="session")
def public_key_pem(rsa_key):
    return (
        rsa_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )


@pytest.fixture
def jwt_credentials(private_key_pem):
    return JwtCredentials(
        client_id="3MVG9-client",
        username="integration@example.com",
        private_key=private_key_pem,
        environment="production",
    )


@pytest.fixture
def oauth2_credentials():
    return OAuth2Credentials(access_token_url=TOKEN_URL, access_token="00DOAUTH")


@pytest.fixture
def fake_host(jwt_credentials, oauth2_credentials):
    """Factory for FakeHost instances wired with both credential variants."""

    def _make(responses=None, authentication="oAuth2", **kwargs):
        return FakeHost(
            responses=responses,
            parameters={"authentication": authentication},
            credentials={
                JWT_CREDENTIALS: jwt_credentials,
                OAUTH2_CREDENTIALS: oauth2_credentials,
            },
            **kwargs,
        )

    return _make


@pytest.fixture(name="make_response")
def make_response_fixture():
    return make_response


@pytest.fixture(name="http_error")
def http_error_fixture():
    return http_error
