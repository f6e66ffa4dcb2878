"""Tests for AdapterConfig -- configuration and settings module.

All tests use real .env files in temporary directories and real environment
variables (through monkeypatch).
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from eer_mcp.config import (
    DEFAULT_ENV_FILE_NAME,
    ENV_PREFIX,
    SESSION_KEY,
    AdapterConfig,
    _collect_overrides,
    _load_env_file,
    mask_token,
)


@pytest.fixture()
def env_file(tmp_path: Path) -> Path:
    path = tmp_path / "settings.env"
    path.write_text(
        "# backend\n"
        "SPRING_BASE_URL=http://spring.internal:8080/\n"
        "SPRING_DOMAIN_ID=NODE0000000456\n"
        "SESSION_ID=abc123token\n"
        "PORT=4000\n",
        encoding="utf-8",
    )
    return path


# ---------------------------------------------------------------------------
# Default construction
# ---------------------------------------------------------------------------


class TestDefaultConstruction:
    """AdapterConfig with no arguments uses the documented defaults."""

    def test_default_backend(self) -> None:
        config = AdapterConfig()
        assert config.base_url == "http://localhost:19090"
        assert config.ajax_path == "/enomix/common/ajaxHandler.ex"
        assert config.domain_id == "NODE0000000001"

    def test_default_session_is_unconfigured(self) -> None:
        config = AdapterConfig()
        assert config.session_id == ""
        assert config.session_configured is False

    def test_default_transport_settings(self) -> None:
        config = AdapterConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 3000
        assert config.timeout_seconds == 60.0
        assert config.log_level == "INFO"

    def test_env_file_defaults_to_cwd(self, tmp_path: Path) -> None:
        config = AdapterConfig()
        assert config.env_file == str(Path.cwd() / DEFAULT_ENV_FILE_NAME)

    def test_endpoint_url(self) -> None:
        config = AdapterConfig(base_url="http://spring:8080/")
        assert config.endpoint_url == "http://spring:8080/enomix/common/ajaxHandler.ex"


# ---------------------------------------------------------------------------
# Validation and normalisation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_invalid_log_level_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid log_level"):
            AdapterConfig(log_level="VERBOSE")

    def test_log_level_is_upper_cased(self) -> None:
        assert AdapterConfig(log_level="debug").log_level == "DEBUG"

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            AdapterConfig(timeout_seconds=0)

    def test_port_range(self) -> None:
        with pytest.raises(ValueError):
            AdapterConfig(port=70000)

    def test_ajax_path_gets_leading_slash(self) -> None:
        assert AdapterConfig(ajax_path="enomix/x.ex").ajax_path == "/enomix/x.ex"

    def test_session_id_is_stripped(self) -> None:
        config = AdapterConfig(session_id="  tok  ")
        assert config.session_id == "tok"
        assert config.session_configured is True


# ---------------------------------------------------------------------------
# load(): environment > .env > defaults
# ---------------------------------------------------------------------------


class TestLoad:
    def test_values_from_env_file(self, env_file: Path) -> None:
        config = AdapterConfig.load(env_file=str(env_file))
        assert config.base_url == "http://spring.internal:8080"
        assert config.domain_id == "NODE0000000456"
        assert config.session_id == "abc123token"
        assert config.port == 4000
        assert config.env_file == str(env_file.resolve())

    def test_environment_overrides_env_file(self, env_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPRING_DOMAIN_ID", "NODE0000000999")
        monkeypatch.setenv(SESSION_KEY, "from-env")
        config = AdapterConfig.load(env_file=str(env_file))
        assert config.domain_id == "NODE0000000999"
        assert config.session_id == "from-env"
        assert config.base_url == "http://spring.internal:8080"

    def test_missing_env_file_uses_defaults(self, tmp_path: Path) -> None:
        config = AdapterConfig.load(env_file=str(tmp_path / "missing.env"))
        assert config.base_url == "http://localhost:19090"
        assert config.session_configured is False

    def test_env_file_from_environment(self, env_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(f"{ENV_PREFIX}ENV_FILE", str(env_file))
        config = AdapterConfig.load()
        assert config.session_id == "abc123token"

    def test_dot_env_in_cwd_is_default(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("SESSION_ID=cwdtoken\n", encoding="utf-8")
        config = AdapterConfig.load()
        assert config.session_id == "cwdtoken"
        assert config.env_file == str((tmp_path / ".env").resolve())

    def test_timeout_from_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(f"{ENV_PREFIX}TIMEOUT", "12.5")
        config = AdapterConfig.load(env_file=str(tmp_path / "none.env"))
        assert config.timeout_seconds == 12.5


class TestCollectOverrides:
    def test_invalid_port_is_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="eer_mcp.config"):
            overrides = _collect_overrides({"PORT": "abc"}, source="test")
        assert "port" not in overrides
        assert "Invalid PORT value" in caplog.text

    def test_unrelated_keys_are_ignored(self) -> None:
        assert _collect_overrides({"PATH": "/usr/bin"}, source="test") == {}

    def test_load_env_file_missing_returns_empty(self, tmp_path: Path) -> None:
        assert _load_env_file(str(tmp_path / "nope.env")) == {}


# ---------------------------------------------------------------------------
# Utilities
# ---------------------------------------------------------------------------


class TestMasking:
    def test_long_token_shows_prefix(self) -> None:
        assert mask_token("1kymf8yzu71xdb0cbxpzuffxb") == "1kymf8yzu7..."

    def test_short_token_fully_masked(self) -> None:
        assert mask_token("abc") == "***"

    def test_empty_token(self) -> None:
        assert mask_token("") == ""

    def test_to_dict_masks_session(self) -> None:
        data = AdapterConfig(session_id="1kymf8yzu71xdb0cbxpzuffxb").to_dict()
        assert data["session_id"] == "1kymf8yzu7..."

    def test_to_dict_unmasked(self) -> None:
        data = AdapterConfig(session_id="1kymf8yzu71xdb0cbxpzuffxb").to_dict(mask_session=False)
        assert data["session_id"] == "1kymf8yzu71xdb0cbxpzuffxb"

    def test_repr_hides_token(self) -> None:
        text = repr(AdapterConfig(session_id="1kymf8yzu71xdb0cbxpzuffxb"))
        assert "1kymf8yzu71xdb0cbxpzuffxb" not in text
        assert "session_configured=True" in text


class TestConfigureLogging:
    def test_handler_added_once(self) -> None:
        pkg_logger = logging.getLogger("eer_mcp")
        saved = list(pkg_logger.handlers)
        for handler in saved:
            pkg_logger.removeHandler(handler)
        try:
            config = AdapterConfig(log_level="DEBUG")
            config.configure_logging()
            config.configure_logging()
            assert len(pkg_logger.handlers) == 1
            assert pkg_logger.level == logging.DEBUG
        finally:
            for handler in list(pkg_logger.handlers):
                pkg_logger.removeHandler(handler)
            for handler in saved:
                pkg_logger.addHandler(handler)
