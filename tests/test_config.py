"""Tests for environment-driven settings and logging."""

import io
import logging

import pytest

from snapvc import Settings
from snapvc.log import ROOT_LOGGER, configure_logging, get_logger


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings == Settings()
        assert settings.repo_dir == ".snapvc"
        assert settings.storage == "files"
        assert settings.lca == "first-parent"
        assert settings.log_level == logging.WARNING

    def test_from_env(self):
        settings = Settings.from_env(
            {
                "SNAPVC_DIR": ".vc",
                "SNAPVC_STORAGE": "disk",
                "SNAPVC_LCA": "all-parents",
                "SNAPVC_LOG_LEVEL": "info",
            }
        )
        assert settings == Settings(
            repo_dir=".vc", storage="disk", lca="all-parents", log_level=logging.INFO
        )

    def test_debug_wins(self):
        env = {"SNAPVC_DEBUG": "1", "SNAPVC_LOG_LEVEL": "error"}
        assert Settings.from_env(env).log_level == logging.DEBUG

    @pytest.mark.parametrize(
        "env",
        [
            {"SNAPVC_LOG_LEVEL": "chatty"},
            {"SNAPVC_STORAGE": "cloud"},
            {"SNAPVC_LCA": "octopus"},
            {"SNAPVC_DIR": "a/b"},
            {"SNAPVC_DIR": ""},
        ],
    )
    def test_invalid(self, env):
        with pytest.raises(ValueError):
            Settings.from_env(env)

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("SNAPVC_STORAGE", "disk")
        assert Settings.from_env().storage == "disk"


@pytest.fixture
def restore_logging():
    root = logging.getLogger(ROOT_LOGGER)
    handlers, level, propagate = list(root.handlers), root.level, root.propagate
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    root.propagate = propagate


class TestLogging:
    def test_key_value_events(self, restore_logging):
        stream = io.StringIO()
        configure_logging(logging.INFO, stream)
        get_logger("snapvc.test").info("commit.created", files=2)
        line = stream.getvalue()
        assert "level='info'" in line
        assert "event='commit.created'" in line
        assert "files=2" in line

    def test_level_threshold(self, restore_logging):
        stream = io.StringIO()
        configure_logging(logging.WARNING, stream)
        get_logger("snapvc.test").info("hidden")
        assert stream.getvalue() == ""

    def test_reconfigure_replaces_handler(self, restore_logging):
        first = configure_logging(logging.INFO, io.StringIO())
        second = configure_logging(logging.DEBUG, io.StringIO())
        handlers = logging.getLogger(ROOT_LOGGER).handlers
        assert second in handlers
        assert first not in handlers
