"""
Unit tests for logging setup and the per-host LoggingConfiguration.
"""

import logging

from apphost.utils.logging import (
    ROOT_LOGGER_NAME,
    LoggingConfiguration,
    configure_root_logging,
    setup_logging,
)
from resources.tests.helpers.features import FeatureA


class TestLoggingConfiguration:

    def test_default_categories(self):
        categories = LoggingConfiguration().categories

        assert categories["application"] == "apphost.host"
        assert categories["features"] == "apphost.features"

    def test_resolve_known_and_unknown_categories(self):
        configuration = LoggingConfiguration(debug_categories=["application", " Features ", "ticker.engine", ""])

        assert configuration.resolve_debug_loggers() == ["apphost.host", "apphost.features", "ticker.engine"]

    def test_wildcard_enables_package(self):
        assert LoggingConfiguration(debug_categories=["features", "1"]).resolve_debug_loggers() == [ROOT_LOGGER_NAME]
        assert LoggingConfiguration(debug_categories=["*"]).resolve_debug_loggers() == [ROOT_LOGGER_NAME]

    def test_feature_category_maps_to_feature_module(self):
        configuration = LoggingConfiguration(debug_categories=["recording"])

        configuration.register_feature_category("Recording", FeatureA)

        assert configuration.resolve_debug_loggers() == [FeatureA.__module__]

    def test_categories_are_per_instance(self):
        first = LoggingConfiguration()
        second = LoggingConfiguration()

        first.register_category("ticker", "ticker")

        assert "ticker" in first.categories
        assert "ticker" not in second.categories

    def test_apply_raises_category_loggers_to_debug(self):
        configuration = LoggingConfiguration(level="warning", debug_categories=["features"])

        configuration.apply()

        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.WARNING
        assert logging.getLogger("apphost.features").level == logging.DEBUG

    def test_apply_adds_and_close_removes_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "host.log"
        configuration = LoggingConfiguration(log_file=log_file)
        package_logger = logging.getLogger(ROOT_LOGGER_NAME)

        configuration.apply()
        try:
            assert log_file.parent.is_dir()
            assert any(isinstance(h, logging.FileHandler) for h in package_logger.handlers)
        finally:
            configuration.close()

        assert not any(
            isinstance(h, logging.FileHandler) and h.baseFilename == str(log_file)
            for h in package_logger.handlers
        )


class TestSetupLogging:

    def test_module_logger_without_level_has_no_handlers(self):
        logger = setup_logging("apphost.tests.bare")

        assert logger.name == "apphost.tests.bare"
        assert logger.handlers == []

    def test_structured_logger_writes_json(self, tmp_path):
        log_file = tmp_path / "structured.log"
        logger = setup_logging("apphost.tests.structured", level="INFO", structured=True, log_file=log_file)
        try:
            logger.propagate = False
            logger.info("quote received")
            for handler in logger.handlers:
                handler.flush()

            content = log_file.read_text()
            assert '"message": "quote received"' in content
            assert '"levelname": "INFO"' in content
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()

    def test_configure_root_logging_with_file(self, tmp_path):
        log_file = tmp_path / "root.log"
        package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        saved_handlers = list(package_logger.handlers)
        saved_propagate = package_logger.propagate
        root_handlers = list(logging.getLogger().handlers)
        root_level = logging.getLogger().level

        configure_root_logging(level="INFO", log_file=log_file)
        try:
            logging.getLogger("apphost.tests.root").info("written to file")
            for handler in package_logger.handlers:
                handler.flush()

            assert "written to file" in log_file.read_text()
        finally:
            for handler in list(package_logger.handlers):
                package_logger.removeHandler(handler)
                handler.close()
            for handler in saved_handlers:
                package_logger.addHandler(handler)
            package_logger.propagate = saved_propagate

            root = logging.getLogger()
            root.setLevel(root_level)
            for handler in list(root.handlers):
                if handler not in root_handlers:
                    root.removeHandler(handler)
                    handler.close()
            for handler in root_handlers:
                if handler not in root.handlers:
                    root.addHandler(handler)
