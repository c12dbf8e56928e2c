"""
Settings

All managed paths are fixed relative to $HOME. Only the GitHub coordinates
(host, owner, singleton repository) and the key comment can be overridden,
through AGENT_SANDBOX_* environment variables or ~/.agent-sandbox.env.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values

from agent_sandbox import constants
from agent_sandbox.exceptions import ConfigurationError

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class SandboxSettings:
    """Desired state for one setup run."""

    home: Path
    github_host: str = constants.DEFAULT_GITHUB_HOST
    github_owner: str = constants.DEFAULT_GITHUB_OWNER
    singleton_name: str = constants.DEFAULT_SINGLETON_NAME
    singleton_url: Optional[str] = None
    key_comment: str = constants.DEFAULT_KEY_COMMENT
    repo_list_limit: int = constants.REPO_LIST_LIMIT
    verbose: bool = False

    def __post_init__(self):
        self.home = Path(self.home)
        if not self.singleton_url:
            self.singleton_url = (
                f"{constants.GITHUB_SSH_USER}@{self.github_host}:"
                f"{self.github_owner}/{self.singleton_name}.git"
            )

    @property
    def ssh_dir(self) -> Path:
        return self.home / constants.SSH_DIR_NAME

    @property
    def key_path(self) -> Path:
        return self.ssh_dir / constants.SSH_KEY_NAME

    @property
    def public_key_path(self) -> Path:
        return self.key_path.with_name(self.key_path.name + ".pub")

    @property
    def ssh_config_path(self) -> Path:
        return self.ssh_dir / constants.SSH_CONFIG_NAME

    @property
    def singleton_path(self) -> Path:
        return self.home / constants.SINGLETON_DIR_NAME

    @property
    def singleton_backup_path(self) -> Path:
        """Preferred backup location; the reconciler picks a free variant."""
        return self.home / (constants.SINGLETON_DIR_NAME + constants.SINGLETON_BACKUP_SUFFIX)

    @property
    def sandboxes_dir(self) -> Path:
        return self.home / constants.SANDBOXES_DIR_NAME

    @property
    def log_dir(self) -> Path:
        return self.home / constants.LOG_DIR

    @classmethod
    def from_env(
        cls,
        home: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "SandboxSettings":
        """
        Build settings from defaults, the optional settings file and the environment.

        Args:
            home: Home directory (defaults to the current user's)
            environ: Environment mapping (defaults to os.environ)

        Returns:
            SandboxSettings instance

        Raises:
            ConfigurationError: If an override has an invalid value
        """
        home = Path(home) if home else Path.home()
        environ = os.environ if environ is None else environ

        values: Dict[str, str] = {}
        settings_file = home / constants.SETTINGS_FILE_NAME
        if settings_file.exists():
            values.update(
                {k: v for k, v in dotenv_values(settings_file).items() if v is not None}
            )
        values.update(
            {k: v for k, v in environ.items() if k.startswith(constants.ENV_PREFIX)}
        )

        def pick(key: str, default):
            value = values.get(constants.ENV_PREFIX + key)
            return value.strip() if value and value.strip() else default

        limit_raw = pick("REPO_LIST_LIMIT", str(constants.REPO_LIST_LIMIT))
        try:
            limit = int(limit_raw)
        except ValueError:
            raise ConfigurationError(
                f"Invalid repository list limit: {limit_raw!r}",
                context=f"Set {constants.ENV_PREFIX}REPO_LIST_LIMIT to a positive integer",
            )
        if limit <= 0:
            raise ConfigurationError(
                f"Invalid repository list limit: {limit}",
                context=f"Set {constants.ENV_PREFIX}REPO_LIST_LIMIT to a positive integer",
            )

        verbose = any(
            str(environ.get(name, "")).strip().lower() in _TRUTHY
            for name in (constants.ENV_PREFIX + "VERBOSE", "VERBOSE", "DEBUG")
        )

        return cls(
            home=home,
            github_host=pick("GITHUB_HOST", constants.DEFAULT_GITHUB_HOST),
            github_owner=pick("GITHUB_OWNER", constants.DEFAULT_GITHUB_OWNER),
            singleton_name=pick("SINGLETON_NAME", constants.DEFAULT_SINGLETON_NAME),
            singleton_url=pick("SINGLETON_URL", None),
            key_comment=pick("KEY_COMMENT", constants.DEFAULT_KEY_COMMENT),
            repo_list_limit=limit,
            verbose=verbose,
        )
