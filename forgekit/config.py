"""
Configuration for forgekit.

Settings are read once, from a TOML file and/or ``FORGEKIT_*`` environment
variables, validated, and then passed explicitly to providers and the
submitter. Nothing reads configuration lazily.

Example file (``~/.config/forgekit/config.toml``)::

    [user]
    name = "Jane Doe"
    email = "jane@example.com"
    auto_signoff = true

    [remote]
    provider = "gitcode"
    api_url = "https://api.gitcode.com/api/v5"
    token = "..."

    [repo]
    project_id = "owner/repo"
    default_branch = "main"

    [template]
    pr_prefix = "[forgekit]"
"""

import os
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from forgekit.exceptions import ConfigurationError

ENV_PREFIX = "FORGEKIT"
DEFAULT_BRANCH = "main"

# (section, key) for every FORGEKIT_<SECTION>_<KEY> override
_ENV_OVERRIDES = (
    ("user", "name"),
    ("user", "email"),
    ("user", "auto_signoff"),
    ("remote", "provider"),
    ("remote", "api_url"),
    ("remote", "token"),
    ("repo", "project_id"),
    ("repo", "default_branch"),
    ("template", "pr_prefix"),
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ProviderType(str, Enum):
    """Supported forge flavors."""

    GITHUB = "github"
    GITLAB = "gitlab"
    GITCODE = "gitcode"

    @classmethod
    def parse(cls, value: str) -> "ProviderType":
        """
        Parse a provider identifier, case-insensitively.

        Raises:
            ConfigurationError: If the identifier names no supported provider
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            expected = ", ".join(p.value for p in cls)
            raise ConfigurationError(
                f"Unknown provider '{value}'. Expected one of: {expected}"
            ) from None


def split_project_id(project_id: str) -> tuple[str, str]:
    """Split ``owner/repo`` into its two segments."""
    parts = project_id.strip().split("/")
    if len(parts) != 2 or not all(parts):
        raise ConfigurationError(
            f"Project ID format should be 'owner/repo', got '{project_id}'"
        )
    return parts[0], parts[1]


def is_valid_email(email: str) -> bool:
    return (
        "@" in email
        and "." in email
        and not email.startswith("@")
        and not email.endswith(".")
        and len(email) > 5
    )


def is_valid_url(url: str) -> bool:
    return url.startswith(("http://", "https://")) and len(url) > 10


@dataclass(frozen=True)
class UserIdentity:
    """Who commits and opens pull requests."""

    name: str
    email: str
    auto_signoff: bool = False

    @property
    def signature(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass(frozen=True)
class RemoteConfig:
    """Where the repository lives and how to reach it."""

    provider: ProviderType
    api_url: str
    token: str = field(repr=False)
    owner: str
    repo: str
    default_branch: str = DEFAULT_BRANCH

    @classmethod
    def from_project_id(
        cls,
        project_id: str,
        *,
        provider: ProviderType | str,
        api_url: str,
        token: str,
        default_branch: str = DEFAULT_BRANCH,
    ) -> "RemoteConfig":
        """Build a RemoteConfig from an ``owner/repo`` project id."""
        owner, repo = split_project_id(project_id)
        if not isinstance(provider, ProviderType):
            provider = ProviderType.parse(provider)
        return cls(
            provider=provider,
            api_url=api_url.rstrip("/"),
            token=token,
            owner=owner,
            repo=repo,
            default_branch=default_branch or DEFAULT_BRANCH,
        )

    @property
    def project_id(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class TemplateConfig:
    """Pull request presentation."""

    pr_prefix: str = ""


@dataclass(frozen=True)
class Settings:
    """Complete, validated configuration."""

    user: UserIdentity
    remote: RemoteConfig
    template: TemplateConfig = field(default_factory=TemplateConfig)

    @classmethod
    def from_toml(cls, path: str | Path | None = None) -> "Settings":
        """
        Load settings from a TOML file, then apply environment overrides.

        Args:
            path: Config file (default: ``default_config_path()``)

        Raises:
            ConfigurationError: If the file is unreadable, malformed or invalid
        """
        config_path = Path(path) if path is not None else default_config_path()
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read configuration file {config_path}: {e}"
            ) from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(
                f"Failed to parse configuration file {config_path}: {e}"
            ) from e
        return cls.from_mapping(data)

    @classmethod
    def from_toml_string(cls, text: str) -> "Settings":
        """Load settings from TOML text, then apply environment overrides."""
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Failed to parse configuration: {e}") from e
        return cls.from_mapping(data)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Load settings from environment variables alone.

        Environment variables:
            FORGEKIT_USER_NAME, FORGEKIT_USER_EMAIL: Identity (required)
            FORGEKIT_USER_AUTO_SIGNOFF: "true"/"false" (optional)
            FORGEKIT_REMOTE_PROVIDER: github, gitlab or gitcode (required)
            FORGEKIT_REMOTE_API_URL: API base URL (required)
            FORGEKIT_REMOTE_TOKEN: Access token (required)
            FORGEKIT_REPO_PROJECT_ID: "owner/repo" (required)
            FORGEKIT_REPO_DEFAULT_BRANCH: Default branch (optional, default: main)
            FORGEKIT_TEMPLATE_PR_PREFIX: Pull request title prefix (optional)

        Raises:
            ConfigurationError: If a required variable is missing or invalid
        """
        return cls.from_mapping({})

    @classmethod
    def from_mapping(
        cls,
        data: dict[str, Any],
        environ: dict[str, str] | None = None,
    ) -> "Settings":
        """Build settings from parsed TOML sections, applying environment overrides once."""
        sections = apply_env_overrides(data, os.environ if environ is None else environ)
        user = sections["user"]
        remote = sections["remote"]
        repo = sections["repo"]
        template = sections["template"]

        settings = cls(
            user=UserIdentity(
                name=str(user.get("name", "")),
                email=str(user.get("email", "")),
                auto_signoff=_parse_bool(user.get("auto_signoff", False), False),
            ),
            remote=_build_remote(remote, repo),
            template=TemplateConfig(pr_prefix=str(template.get("pr_prefix", ""))),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """
        Check field contents.

        Raises:
            ConfigurationError: On the first invalid field
        """
        if not self.user.name:
            raise ConfigurationError("User name cannot be empty")
        if not self.user.email:
            raise ConfigurationError("User email cannot be empty")
        if not is_valid_email(self.user.email):
            raise ConfigurationError(f"Invalid email format: {self.user.email}")
        if not is_valid_url(self.remote.api_url):
            raise ConfigurationError(f"Invalid API URL format: {self.remote.api_url}")
        if not self.remote.token:
            raise ConfigurationError("Access token cannot be empty")


def _parse_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return default


def _build_remote(remote: dict[str, Any], repo: dict[str, Any]) -> RemoteConfig:
    provider = str(remote.get("provider", ""))
    if not provider:
        raise ConfigurationError("Provider cannot be empty")
    api_url = str(remote.get("api_url", ""))
    if not api_url:
        raise ConfigurationError("API URL cannot be empty")
    project_id = str(repo.get("project_id", ""))
    if not project_id:
        raise ConfigurationError("Project ID cannot be empty")
    return RemoteConfig.from_project_id(
        project_id,
        provider=provider,
        api_url=api_url,
        token=str(remote.get("token", "")),
        default_branch=str(repo.get("default_branch", DEFAULT_BRANCH)),
    )


def apply_env_overrides(
    data: dict[str, Any],
    environ: dict[str, str] | os._Environ[str],
) -> dict[str, dict[str, Any]]:
    """
    Return a copy of the config sections with ``FORGEKIT_*`` overrides applied.

    ``FORGEKIT_USER_AUTO_SIGNOFF`` values that are not recognisable booleans
    leave the file value in place.
    """
    sections: dict[str, dict[str, Any]] = {
        name: dict(data.get(name) or {})
        for name in ("user", "remote", "repo", "template")
    }
    for section, key in _ENV_OVERRIDES:
        value = environ.get(f"{ENV_PREFIX}_{section.upper()}_{key.upper()}")
        if value is None:
            continue
        if key == "auto_signoff":
            current = _parse_bool(sections[section].get(key, False), False)
            sections[section][key] = _parse_bool(value, current)
        else:
            sections[section][key] = value
    return sections


def default_config_path() -> Path:
    """``$XDG_CONFIG_HOME/forgekit/config.toml``, falling back to ``~/.config``."""
    base = os.environ.get("XDG_CONFIG_HOME")
    config_dir = Path(base) if base else Path.home() / ".config"
    return config_dir / "forgekit" / "config.toml"


def example_config() -> str:
    """A commented sample configuration file."""
    return """\
# forgekit configuration
# Location: ~/.config/forgekit/config.toml

[user]
name = "Jane Doe"
email = "jane.doe@example.com"
# Append a Signed-off-by trailer to commit messages
auto_signoff = true

[remote]
# github, gitlab or gitcode
provider = "gitcode"
api_url = "https://api.gitcode.com/api/v5"
token = "your-api-token-here"

[repo]
project_id = "owner/repo"
default_branch = "main"

[template]
pr_prefix = "[forgekit]"
"""
