"""Tests for client options."""

import json

import pytest

from quickbase_client.auth import CredentialResolver
from quickbase_client.config import QuickBaseOptions


class TestDefaults:
    @pytest.mark.unit
    def test_defaults(self):
        options = QuickBaseOptions()

        assert options.base_url == "https://api.quickbase.com/v1/"
        assert options.connection_limit == 10
        assert options.connection_limit_period == 1000
        assert options.auto_renew_temp_tokens is True
        assert options.retry_on_quota_exceeded is True
        assert options.error_on_connection_limit is False

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("realm", "hostname", "legacy_url"),
        [
            ("demo", "demo.quickbase.com", "https://demo.quickbase.com/"),
            ("demo.quickbase.com", "demo.quickbase.com", "https://demo.quickbase.com/"),
            ("", "", "https://www.quickbase.com/"),
        ],
    )
    def test_realm_hosts(self, realm, hostname, legacy_url):
        options = QuickBaseOptions(realm=realm)

        assert options.realm_hostname == hostname
        assert options.legacy_base_url == legacy_url

    @pytest.mark.unit
    def test_set_temp_token(self):
        options = QuickBaseOptions()

        options.set_temp_token("bt1", "temp")

        assert options.temp_token == "temp"
        assert options.temp_token_dbid == "bt1"


class TestSerialization:
    """Options survive export and import unchanged."""

    @pytest.mark.unit
    def test_round_trip_is_byte_identical(self):
        options = QuickBaseOptions(
            realm="demo.quickbase.com",
            user_token="b123_user",
            temp_token="temp",
            temp_token_dbid="bt1",
            connection_limit=3,
            connection_limit_period=None,
            proxy="http://proxy.local:3128",
        )

        exported = options.to_json()
        rebuilt = QuickBaseOptions.from_dict(exported)

        assert rebuilt == options
        assert rebuilt.to_json() == exported

    @pytest.mark.unit
    def test_json_keys_are_sorted(self):
        keys = list(json.loads(QuickBaseOptions().to_json()))

        assert keys == sorted(keys)

    @pytest.mark.unit
    def test_from_dict_ignores_unknown_keys(self):
        options = QuickBaseOptions.from_dict({"realm": "demo", "flux_capacitor": True})

        assert options == QuickBaseOptions(realm="demo")

    @pytest.mark.unit
    @pytest.mark.parametrize("data", ["[]", "null", "7", ["realm"]])
    def test_from_dict_rejects_non_objects(self, data):
        with pytest.raises(TypeError):
            QuickBaseOptions.from_dict(data)

    @pytest.mark.unit
    def test_from_dict_rejects_invalid_json(self):
        with pytest.raises(json.JSONDecodeError):
            QuickBaseOptions.from_dict("{not json")


class TestFromEnv:
    @pytest.mark.unit
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("QB_REALM", "env.quickbase.com")
        monkeypatch.setenv("QB_USER_TOKEN", "b123_env")

        options = QuickBaseOptions.from_env(CredentialResolver(load_dotenv=False))

        assert options.realm == "env.quickbase.com"
        assert options.user_token == "b123_env"
        assert options.app_token == ""

    @pytest.mark.unit
    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("QB_REALM", "env.quickbase.com")

        options = QuickBaseOptions.from_env(
            CredentialResolver(load_dotenv=False), realm="explicit.quickbase.com", connection_limit=2
        )

        assert options.realm == "explicit.quickbase.com"
        assert options.connection_limit == 2


class TestActiveToken:
    @pytest.mark.unit
    def test_temp_token_wins(self):
        options = QuickBaseOptions(user_token="b123_user", temp_token="temp", temp_token_dbid="bt1")

        assert options.active_token("bt1") == ("QB-TEMP-TOKEN", "temp")
        assert options.active_token() == ("QB-TEMP-TOKEN", "temp")

    @pytest.mark.unit
    def test_user_token_for_other_resource(self):
        options = QuickBaseOptions(user_token="b123_user", temp_token="temp", temp_token_dbid="bt1")

        assert options.active_token("bt2") == ("QB-USER-TOKEN", "b123_user")

    @pytest.mark.unit
    def test_no_token(self):
        assert QuickBaseOptions().active_token() is None


class TestFromEnvFiles:
    """Secrets read from files named in the environment."""

    @pytest.mark.unit
    def test_secrets_from_files(self, tmp_path, monkeypatch):
        token_file = tmp_path / "user_token"
        token_file.write_text("b123_from_file\n")
        password_file = tmp_path / "password"
        password_file.write_text("hunter2")
        monkeypatch.setenv("QB_USER_TOKEN_FILE", str(token_file))
        monkeypatch.setenv("QB_PASSWORD_FILE", str(password_file))

        options = QuickBaseOptions.from_env(CredentialResolver(load_dotenv=False))

        assert options.user_token == "b123_from_file"
        assert options.password == "hunter2"
        assert options.app_token == ""

    @pytest.mark.unit
    def test_plain_variable_wins_over_file(self, tmp_path, monkeypatch):
        token_file = tmp_path / "user_token"
        token_file.write_text("b123_from_file")
        monkeypatch.setenv("QB_USER_TOKEN", "b123_env")
        monkeypatch.setenv("QB_USER_TOKEN_FILE", str(token_file))

        options = QuickBaseOptions.from_env(CredentialResolver(load_dotenv=False))

        assert options.user_token == "b123_env"
