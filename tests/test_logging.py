"""
Tests for logging configuration module.
"""

import pytest
import logging
from io import StringIO

from epmaquant.core.logging_config import setup_logging, get_logger


def test_setup_logging_default():
    """Test setting up logging with default parameters."""
    stream = StringIO()
    setup_logging(level="INFO", stream=stream)

    logger = logging.getLogger("epmaquant.test")
    logger.info("Test message")

    output = stream.getvalue()
    assert "Test message" in output
    assert "INFO" in output


def test_setup_logging_custom_level():
    """Debug records pass once the level is lowered."""
    stream = StringIO()
    setup_logging(level="DEBUG", stream=stream)

    get_logger("test").debug("Debug message")

    assert "Debug message" in stream.getvalue()


def test_setup_logging_filters_below_level():
    """Records below the configured level are dropped."""
    stream = StringIO()
    setup_logging(level="WARNING", stream=stream)

    get_logger("test").info("Quiet message")

    assert "Quiet message" not in stream.getvalue()


def test_setup_logging_custom_format():
    """Test setting up logging with custom format."""
    stream = StringIO()
    setup_logging(level="INFO", format_string="%(levelname)s - %(message)s", stream=stream)

    get_logger("test").info("Test message")

    assert "INFO - Test message" in stream.getvalue()


def test_setup_logging_numeric_level():
    stream = StringIO()
    logger = setup_logging(level=logging.ERROR, stream=stream)

    get_logger("test").warning("Dropped warning")

    assert logger.name == "epmaquant"
    assert logger.level == logging.ERROR
    assert "Dropped warning" not in stream.getvalue()


def test_setup_logging_unknown_level():
    with pytest.raises(ValueError, match="Unknown logging level"):
        setup_logging(level="LOUD")


def test_setup_logging_replaces_handler():
    """Repeated setup does not duplicate output."""
    first, second = StringIO(), StringIO()
    setup_logging(level="INFO", stream=first)
    setup_logging(level="INFO", stream=second)

    get_logger("test").info("Once")

    assert first.getvalue() == ""
    assert second.getvalue().count("Once") == 1


def test_get_logger():
    """Test getting a logger instance."""
    logger = get_logger("inversion.iteration")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "epmaquant.inversion.iteration"
    assert get_logger("epmaquant.inversion.iteration") is logger


def test_iteration_logs_progress(make_kratio):
    """A quantification run reports its start and convergence at INFO."""
    from epmaquant.atomic.material import pure
    from epmaquant.inversion.iteration import Iteration

    stream = StringIO()
    setup_logging(level="INFO", stream=stream)

    Iteration().iterate("logged", [make_kratio("Fe", "Ka", pure("Fe"), 1.0)])

    output = stream.getvalue()
    assert "Quantifying logged" in output
    assert "converged" in output


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
