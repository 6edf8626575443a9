"""Pytest configuration and shared fixtures for the latextree test suite.

This module provides shared fixtures, test configuration, and utilities
that are used across the entire test suite.
"""

from pathlib import Path
from typing import Generator

import pytest
from utils import SAMPLE_ARTICLE, cleanup_test_dir, create_test_temp_dir

from latextree import ParserOptions, ParseTree, parse

# Configure Hypothesis for property-based testing
try:
    from hypothesis import Phase, Verbosity, settings

    # Register custom Hypothesis profiles
    settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
    settings.register_profile("dev", max_examples=20)
    settings.register_profile(
        "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
    )

    # Load profile from environment or use default
    import os

    profile = os.getenv("HYPOTHESIS_PROFILE", "dev")
    settings.load_profile(profile)
except ImportError:
    # Hypothesis not installed, skip configuration
    pass


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")
    config.addinivalue_line("markers", "fuzzing: Property-based tests driven by hypothesis")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for test files.

    Yields
    ------
    Path
        Temporary directory path that will be cleaned up after test.

    """
    temp_path = create_test_temp_dir()
    try:
        yield temp_path
    finally:
        cleanup_test_dir(temp_path)


@pytest.fixture
def sample_article() -> str:
    """Provide a small but complete LaTeX article.

    Returns
    -------
    str
        Article source exercising commands, environments, math, comments,
        verbatim and definitions.

    """
    return SAMPLE_ARTICLE


@pytest.fixture
def article_tree(sample_article: str) -> ParseTree:
    """Provide the parse tree of the sample article."""
    return parse(sample_article)


@pytest.fixture
def at_letter_options() -> ParserOptions:
    """Provide parser options treating '@' as a letter."""
    return ParserOptions(at_letter=True)
