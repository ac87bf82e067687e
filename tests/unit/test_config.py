"""Unit tests for config loading (securelink.config).

  - GOOGLE_API_KEY is required → SystemExit(1) with a CONFIG ERROR message
  - defaults: client id "securelink-app", port 8080, timeout 10s
  - env overrides: GOOGLE_CLIENT_ID, HOST, PORT, SECURELINK_TIMEOUT_S
  - empty env values count as unset
  - optional YAML file: version validation, parse errors, merge onto defaults
  - api_key is never read from a file
"""

from __future__ import annotations

import textwrap
from typing import Any

import pytest

from securelink.config import (
    SUPPORTED_VERSIONS,
    Config,
    SafeBrowsingConfig,
    ServerConfig,
    load_config,
)

MISSING = "/nonexistent/path/config.yaml"


# ─── Required credential ──────────────────────────────────────────────────────


class TestRequiredApiKey:

    def test_missing_api_key_exits(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
    ) -> None:
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path=MISSING)
        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert "CONFIG ERROR" in captured.err
        assert "GOOGLE_API_KEY" in captured.err

    def test_empty_api_key_exits(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GOOGLE_API_KEY", "")
        with pytest.raises(SystemExit):
            load_config(config_path=MISSING)

    def test_api_key_loaded_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GOOGLE_API_KEY", "abc123")
        config = load_config(config_path=MISSING)
        assert config.safe_browsing.api_key == "abc123"

    def test_api_key_in_file_is_ignored(
        self, tmp_path: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        config_file = tmp_path / "config.yaml"
        config_file.write_text("version: 1\nsafe_browsing:\n  api_key: from-file\n")
        with pytest.raises(SystemExit):
            load_config(config_path=str(config_file))


# ─── Defaults ─────────────────────────────────────────────────────────────────


class TestDefaults:

    def test_missing_file_is_not_an_error(self) -> None:
        config = load_config(config_path=MISSING)
        assert isinstance(config, Config)
        assert config.version == 1
        assert config.path is None

    def test_default_client_id(self) -> None:
        assert load_config(config_path=MISSING).safe_browsing.client_id == "securelink-app"

    def test_default_port_and_host(self) -> None:
        config = load_config(config_path=MISSING)
        assert config.server.port == 8080
        assert config.server.host == "0.0.0.0"

    def test_default_timeout_in_reference_range(self) -> None:
        timeout = load_config(config_path=MISSING).safe_browsing.timeout_s
        assert 10 <= timeout <= 15

    def test_dataclass_defaults(self) -> None:
        config = Config.defaults()
        assert config.safe_browsing == SafeBrowsingConfig()
        assert config.server == ServerConfig()
        assert config.safe_browsing.api_key == ""

    def test_supported_versions(self) -> None:
        assert SUPPORTED_VERSIONS == frozenset({1})


# ─── Environment overrides ────────────────────────────────────────────────────


class TestEnvOverrides:

    def test_client_id(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GOOGLE_CLIENT_ID", "my-client")
        assert load_config(config_path=MISSING).safe_browsing.client_id == "my-client"

    def test_empty_client_id_uses_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GOOGLE_CLIENT_ID", "")
        assert load_config(config_path=MISSING).safe_browsing.client_id == "securelink-app"

    def test_port(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "9000")
        assert load_config(config_path=MISSING).server.port == 9000

    def test_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOST", "127.0.0.1")
        assert load_config(config_path=MISSING).server.host == "127.0.0.1"

    def test_invalid_port_exits(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
    ) -> None:
        monkeypatch.setenv("PORT", "eighty")
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path=MISSING)
        assert exc_info.value.code == 1
        assert "PORT" in capsys.readouterr().err

    @pytest.mark.parametrize("port", ["0", "70000", "-1"])
    def test_out_of_range_port_exits(self, monkeypatch: pytest.MonkeyPatch, port: str) -> None:
        monkeypatch.setenv("PORT", port)
        with pytest.raises(SystemExit):
            load_config(config_path=MISSING)

    def test_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SECURELINK_TIMEOUT_S", "15")
        assert load_config(config_path=MISSING).safe_browsing.timeout_s == 15.0

    @pytest.mark.parametrize("timeout", ["soon", "0", "-5"])
    def test_invalid_timeout_exits(self, monkeypatch: pytest.MonkeyPatch, timeout: str) -> None:
        monkeypatch.setenv("SECURELINK_TIMEOUT_S", timeout)
        with pytest.raises(SystemExit):
            load_config(config_path=MISSING)


# ─── Config file ──────────────────────────────────────────────────────────────


class TestConfigFile:

    def test_values_merged_onto_defaults(self, tmp_path: Any) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            textwrap.dedent(
                """\
                version: 1
                safe_browsing:
                  client_id: file-client
                  timeout_s: 12
                server:
                  port: 9090
                """
            )
        )
        config = load_config(config_path=str(config_file))
        assert config.path == str(config_file)
        assert config.safe_browsing.client_id == "file-client"
        assert config.safe_browsing.timeout_s == 12
        assert config.safe_browsing.client_version == "1.0"
        assert config.server.port == 9090
        assert config.server.host == "0.0.0.0"

    def test_env_wins_over_file(self, tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("version: 1\nserver:\n  port: 9090\n")
        monkeypatch.setenv("PORT", "7070")
        assert load_config(config_path=str(config_file)).server.port == 7070

    def test_env_config_path(self, tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "env.yaml"
        config_file.write_text("version: 1\nsafe_browsing:\n  client_id: via-env\n")
        monkeypatch.setenv("SECURELINK_CONFIG", str(config_file))
        assert load_config().safe_browsing.client_id == "via-env"

    def test_missing_version_exits(
        self, tmp_path: Any, capsys: pytest.CaptureFixture
    ) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("server:\n  port: 9090\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path=str(config_file))
        assert exc_info.value.code == 1
        assert "version" in capsys.readouterr().err.lower()

    def test_empty_file_exits(self, tmp_path: Any) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")
        with pytest.raises(SystemExit):
            load_config(config_path=str(config_file))

    def test_unsupported_version_exits(
        self, tmp_path: Any, capsys: pytest.CaptureFixture
    ) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("version: 2\n")
        with pytest.raises(SystemExit):
            load_config(config_path=str(config_file))
        assert "Unsupported config version" in capsys.readouterr().err

    def test_invalid_yaml_exits(self, tmp_path: Any, capsys: pytest.CaptureFixture) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("version: 1\nserver: [unclosed\n")
        with pytest.raises(SystemExit):
            load_config(config_path=str(config_file))
        assert "Failed to parse" in capsys.readouterr().err

    def test_non_mapping_exits(self, tmp_path: Any, capsys: pytest.CaptureFixture) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- just\n- a list\n")
        with pytest.raises(SystemExit):
            load_config(config_path=str(config_file))
        assert "not a valid YAML mapping" in capsys.readouterr().err

    def test_file_port_out_of_range_exits(self, tmp_path: Any) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("version: 1\nserver:\n  port: 99999\n")
        with pytest.raises(SystemExit):
            load_config(config_path=str(config_file))
