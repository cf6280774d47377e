"""
Pytest configuration and shared fixtures for typechecker tests.
"""

import pytest
import sys
from pathlib import Path

# Ensure src is in path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from typechecker.settings import get_settings


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Settings are cached per process; start every test from the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
