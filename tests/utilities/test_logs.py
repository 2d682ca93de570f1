"""Tests for logging setup."""

import logging

from elementor_abilities.utilities.logs import ROOT_LOGGER, configure_logging


class TestConfigureLogging:
    def test_level_by_name(self):
        logger = configure_logging("debug")
        assert logger.name == ROOT_LOGGER
        assert logger.level == logging.DEBUG

    def test_unknown_level_falls_back_to_warning(self):
        assert configure_logging("chatty").level == logging.WARNING

    def test_repeated_calls_do_not_stack_handlers(self):
        configure_logging()
        logger = configure_logging()
        assert len(logger.handlers) == 1

    def test_rotating_file(self, tmp_path):
        log_file = tmp_path / "logs" / "abilities.log"
        logger = configure_logging(logging.INFO, log_file)
        logging.getLogger("elementor_abilities.store.memory").info("hello file")
        for handler in logger.handlers:
            handler.flush()
        assert "hello file" in log_file.read_text(encoding="utf-8")
        configure_logging()
