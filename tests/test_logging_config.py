"""Tests for the package logging setup."""

import logging

import pytest

from emi_calc.logging_config import PACKAGE_LOGGER, configure_logging, disable_logging, get_logger


@pytest.fixture
def package_logger():
    yield logging.getLogger(PACKAGE_LOGGER)
    disable_logging()


def test_get_logger_is_namespaced():
    assert get_logger("engine").name == "emi_calc.engine"
    assert get_logger("emi_calc.solvers").name == "emi_calc.solvers"


def test_file_logging(package_logger, tmp_path):
    log_file = tmp_path / "logs" / "emi.log"

    configure_logging(level="DEBUG", log_file=str(log_file), console=False)
    get_logger("engine").debug("Simulating %d months", 240)

    assert package_logger.level == logging.DEBUG
    assert "Simulating 240 months" in log_file.read_text(encoding="utf-8")


def test_level_from_environment(package_logger, monkeypatch):
    monkeypatch.setenv("EMI_CALC_LOG_LEVEL", "error")

    configure_logging(console=False)

    assert package_logger.level == logging.ERROR


def test_disable_logging(package_logger):
    configure_logging(level="INFO")

    disable_logging()

    assert [type(h) for h in package_logger.handlers] == [logging.NullHandler]
