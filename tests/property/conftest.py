"""Pytest configuration for property-based tests.

Set HYPOTHESIS_PROFILE=ci for a longer run or quick for a smoke run.
"""

import os

import pytest
from hypothesis import Phase, Verbosity, settings

settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    verbosity=Verbosity.normal,
)

settings.register_profile(
    "quick",
    max_examples=10,
    deadline=None,
    phases=[Phase.generate],
)

_profile = os.environ.get("HYPOTHESIS_PROFILE", "default")
if _profile in ("ci", "quick"):
    settings.load_profile(_profile)


def pytest_collection_modifyitems(config, items):
    """Mark everything under tests/property with the 'property' marker."""
    for item in items:
        if "property" in str(item.fspath):
            item.add_marker(pytest.mark.property)
