"""
Tests for server wiring, configuration and client construction.
"""

import json

import pytest
from unittest.mock import MagicMock, patch

from core import clients, config
from core.server import health_check, server


class TestHealthCheck:
    """Tests for the /health route."""

    @pytest.mark.asyncio
    async def test_reports_status_and_transport(self):
        response = await health_check(MagicMock())
        payload = json.loads(response.body)
        assert payload["status"] == "healthy"
        assert payload["service"] == "google-docs-mcp"
        assert payload["transport"] == config.get_transport_mode()

    def test_server_name(self):
        assert server.name == "google_docs"


class TestConfig:
    """Tests for transport and path configuration."""

    def test_set_transport_mode_rejects_unknown(self):
        with pytest.raises(ValueError):
            config.set_transport_mode("websocket")

    def test_set_transport_mode(self):
        previous = config.get_transport_mode()
        try:
            config.set_transport_mode("streamable-http")
            assert config.get_transport_mode() == "streamable-http"
        finally:
            config.set_transport_mode(previous)

    def test_resolve_path_prefers_env(self, monkeypatch, tmp_path):
        token = tmp_path / "custom.json"
        monkeypatch.setenv("GDRIVE_MCP_TOKEN_PATH", str(token))
        assert config.get_token_path() == token

    def test_resolve_path_falls_back_to_cwd(self, monkeypatch, tmp_path):
        monkeypatch.delenv("GDRIVE_MCP_TOKEN_PATH", raising=False)
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(config, "CONFIG_DIR", tmp_path / "nowhere")
        assert config.get_token_path() == tmp_path / "token.json"


class TestClients:
    """Tests for credential loading and the ClientSet."""

    def test_missing_token_file(self, monkeypatch, tmp_path):
        monkeypatch.setattr(config, "SERVICE_ACCOUNT_PATH", None)
        monkeypatch.setenv("GDRIVE_MCP_TOKEN_PATH", str(tmp_path / "absent.json"))
        with pytest.raises(clients.CredentialsUnavailableError):
            clients.load_credentials()

    def test_service_account_with_impersonation(self, monkeypatch):
        monkeypatch.setattr(config, "SERVICE_ACCOUNT_PATH", "/keys/sa.json")
        monkeypatch.setattr(config, "GOOGLE_IMPERSONATE_USER", "user@example.com")
        with patch.object(clients.service_account.Credentials, "from_service_account_file") as from_file:
            creds = clients.load_credentials()

        from_file.assert_called_once_with("/keys/sa.json", scopes=config.SCOPES)
        from_file.return_value.with_subject.assert_called_once_with("user@example.com")
        assert creds is from_file.return_value.with_subject.return_value

    def test_client_set_builds_docs_and_drive(self):
        with patch.object(clients, "build") as build:
            client_set = clients.ClientSet.from_credentials("creds")

        assert build.call_count == 2
        build.assert_any_call("docs", "v1", credentials="creds", cache_discovery=False)
        build.assert_any_call("drive", "v3", credentials="creds", cache_discovery=False)
        assert client_set.docs is build.return_value
