"""Forge providers.

One ForgeProvider implementation per supported forge flavor.
"""

from forgekit.providers.base import ForgeProvider
from forgekit.providers.gitcode import GitCodeProvider
from forgekit.providers.github import GitHubProvider
from forgekit.providers.gitlab import GitLabProvider

__all__ = [
    "ForgeProvider",
    "GitCodeProvider",
    "GitHubProvider",
    "GitLabProvider",
]
