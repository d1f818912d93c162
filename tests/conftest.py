"""Pytest configuration and fixtures for segcollider tests.

This module provides pytest hooks and fixtures that apply across all tests.
"""

import logging
import warnings

import pytest

from segcollider.errors import ConfigurationWarning

console_logger = logging.getLogger(__name__)


@pytest.fixture(autouse=True)
def _show_configuration_warnings():
    """Always emit ConfigurationWarning so repeated assertions can observe it."""
    with warnings.catch_warnings():
        warnings.simplefilter("always", ConfigurationWarning)
        yield
