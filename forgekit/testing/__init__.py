"""forgekit testing utilities.

Provides an in-memory provider and fixtures for testing code that uses forgekit.
"""

from forgekit.testing.fixtures import (
    FIXED_TIME,
    create_mock_branch,
    create_mock_pull_request,
)
from forgekit.testing.mock import MockCall, MockForgeProvider, MockResponse, blob_sha

__all__ = [
    # Mock provider
    "MockForgeProvider",
    "MockCall",
    "MockResponse",
    "blob_sha",
    # Helper functions
    "create_mock_branch",
    "create_mock_pull_request",
    "FIXED_TIME",
]
