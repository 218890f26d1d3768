"""Pytest configuration and shared fixtures for the eml2md test suite.

This module provides shared fixtures, test configuration, and utilities
that are used across the entire test suite.
"""

import logging
import os
from pathlib import Path

import pytest
from utils import build_mixed_email, build_simple_email, write_eml

# Configure Hypothesis for property-based testing
from hypothesis import Phase, Verbosity, settings

settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=20)
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")
    config.addinivalue_line("markers", "security: Tests for untrusted input handling")
    config.addinivalue_line("markers", "fuzzing: Property-based tests driven by Hypothesis")


@pytest.fixture
def simple_email() -> str:
    """Provide a single-part text/plain email document."""
    return build_simple_email()


@pytest.fixture
def mixed_email() -> str:
    """Provide a multipart/mixed email with alternative bodies and an inline PNG."""
    return build_mixed_email()


@pytest.fixture
def eml_file(tmp_path: Path, mixed_email: str) -> Path:
    """Provide the mixed email written to ``tmp_path/message.eml``."""
    return write_eml(tmp_path, "message.eml", mixed_email)


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """Restore root logger handlers changed by CLI tests."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in root_logger.handlers:
        if handler not in handlers:
            handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
