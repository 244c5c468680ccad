"""Tests for sfconnect.config."""

import os
from unittest.mock import patch

import pytest

from sfconnect.config import JwtCredentials, OAuth2Credentials, SFConfig
from sfconnect.exceptions import InvalidConfigError, MissingCredentialsError


class TestSFConfig:
    def test_default_values(self):
        cfg = SFConfig()

        assert cfg.authentication == "oAuth2"
        assert cfg.timeout == 30.0

    def test_from_env(self):
        with patch.dict(os.environ, {"SF_AUTHENTICATION": "jwt", "SF_TIMEOUT": "7.5"}, clear=True):
            cfg = SFConfig.from_env()

        assert cfg.authentication == "jwt"
        assert cfg.timeout == 7.5

    def test_from_env_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            cfg = SFConfig.from_env()

        assert cfg == SFConfig()


class TestJwtCredentials:
    def test_missing_values_are_all_reported(self):
        with patch.dict(os.environ, {"SF_USERNAME": "u"}, clear=True):
            with pytest.raises(MissingCredentialsError) as exc_info:
                JwtCredentials.from_env()

        assert exc_info.value.missing == ["SF_CLIENT_ID", "SF_PRIVATE_KEY"]
        assert "SF_CLIENT_ID" in str(exc_info.value)

    def test_private_key_from_file(self, tmp_path):
        key_file = tmp_path / "server.key"
        key_file.write_text("PEM DATA")
        env = {
            "SF_CLIENT_ID": "cid",
            "SF_USERNAME": "u",
            "SF_PRIVATE_KEY_FILE": str(key_file),
        }
        with patch.dict(os.environ, env, clear=True):
            creds = JwtCredentials.from_env()

        assert creds.private_key == "PEM DATA"
        assert creds.environment == "production"
        assert not creds.is_sandbox


class TestOAuth2Credentials:
    def test_from_env(self):
        env = {
            "SF_ACCESS_TOKEN_URL": "https://acme.salesforce.com/services/oauth2/token",
            "SF_ACCESS_TOKEN": "tok",
            "SF_REFRESH_TOKEN": "ref",
        }
        with patch.dict(os.environ, env, clear=True):
            creds = OAuth2Credentials.from_env()

        assert creds.access_token == "tok"
        assert creds.refresh_token == "ref"
        assert creds.client_id is None

    def test_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(MissingCredentialsError) as exc_info:
                OAuth2Credentials.from_env()

        assert exc_info.value.missing == ["SF_ACCESS_TOKEN_URL", "SF_ACCESS_TOKEN"]


class TestInvalidConfig:
    def test_non_numeric_timeout(self):
        with patch.dict(os.environ, {"SF_TIMEOUT": "soon"}, clear=True):
            with pytest.raises(InvalidConfigError) as exc_info:
                SFConfig.from_env()

        assert exc_info.value.name == "SF_TIMEOUT"
        assert "'soon'" in str(exc_info.value)

    def test_unreadable_private_key_file(self, tmp_path):
        missing = tmp_path / "nope.key"
        env = {"SF_CLIENT_ID": "cid", "SF_USERNAME": "u", "SF_PRIVATE_KEY_FILE": str(missing)}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(InvalidConfigError) as exc_info:
                JwtCredentials.from_env()

        assert exc_info.value.name == "SF_PRIVATE_KEY_FILE"
        assert str(missing) in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
