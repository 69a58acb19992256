"""
Pytest plugin for forgekit testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
automatically discovered by pytest when this package is installed.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["forgekit.testing.conftest"]

Or import the fixtures directly:

    from forgekit.testing.fixtures import mock_provider, sample_identity
"""

# Re-export all fixtures for pytest auto-discovery
from forgekit.testing.fixtures import (
    empty_provider,
    fixed_clock,
    mock_provider,
    sample_branch,
    sample_identity,
    sample_pull_request,
    sample_remote_config,
    sample_settings,
    sample_template,
)

__all__ = [
    "mock_provider",
    "empty_provider",
    "sample_identity",
    "sample_template",
    "sample_remote_config",
    "sample_settings",
    "fixed_clock",
    "sample_branch",
    "sample_pull_request",
]
