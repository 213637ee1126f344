import logging
import sys

import pytest
import structlog

from kubesizer.core.utils import setup_logging


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()
    logging.basicConfig(level=logging.WARNING, force=True)


class TestSetupLogging:

    def test_console_renderer_by_default(self):
        setup_logging("INFO")
        renderer = structlog.get_config()["processors"][-1]
        assert isinstance(renderer, structlog.dev.ConsoleRenderer)
        assert logging.getLogger().level == logging.INFO

    def test_json_renderer_from_settings(self):
        setup_logging("DEBUG", json_logs=True)
        renderer = structlog.get_config()["processors"][-1]
        assert isinstance(renderer, structlog.processors.JSONRenderer)
        assert logging.getLogger().level == logging.DEBUG

    def test_logs_go_to_stderr(self):
        setup_logging("INFO")
        handlers = logging.getLogger().handlers
        assert any(getattr(h, "stream", None) is sys.stderr for h in handlers)

    def test_dict_config_file(self, tmp_path):
        config_file = tmp_path / "logging.yaml"
        config_file.write_text(
            "version: 1\n"
            "disable_existing_loggers: false\n"
            "root:\n"
            "  level: ERROR\n"
        )
        setup_logging("DEBUG", config_path=config_file)
        assert logging.getLogger().level == logging.ERROR
