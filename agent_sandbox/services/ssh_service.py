"""SSH service: ~/.ssh/config maintenance and the GitHub connectivity probe."""

import os
from pathlib import Path
from typing import Optional

from agent_sandbox.constants import (
    GITHUB_SSH_USER,
    SSH_ACCEPTED_PATTERN,
    SSH_CONFIG_PERMISSIONS,
    SSH_CONNECT_TIMEOUT,
    SSH_REJECTED_PATTERN,
)
from agent_sandbox.exceptions import TrustConfigError
from agent_sandbox.models.results import ProbeResult, ToolOutcome
from agent_sandbox.models.ssh import TrustEntry
from agent_sandbox.services.runner import CommandRunner


def classify_probe_output(output: str) -> ToolOutcome:
    """
    Classify `ssh -T git@github.com` output.

    GitHub closes the session after authenticating, so ssh exits non-zero
    even when the key is accepted. Only the banner text is trusted.
    """
    if SSH_ACCEPTED_PATTERN in output:
        return ToolOutcome.SUCCESS
    if SSH_REJECTED_PATTERN in output:
        return ToolOutcome.FAILURE
    return ToolOutcome.AMBIGUOUS


class SSHService:
    """Service for SSH operations."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def read_config(self, config_path: Path) -> Optional[str]:
        """
        Read the SSH config file.

        Returns:
            File contents, or None if the file does not exist
        """
        if not config_path.exists():
            return None
        try:
            return config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise TrustConfigError(f"Could not read {config_path}", context=str(e))

    def append_entry(self, config_path: Path, entry: TrustEntry) -> None:
        """
        Append a Host block and restrict the file to the owner.

        Args:
            config_path: Path to ~/.ssh/config
            entry: Block to append

        Raises:
            TrustConfigError: If the file cannot be written
        """
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "a", encoding="utf-8") as f:
                f.write(entry.render())
            os.chmod(config_path, SSH_CONFIG_PERMISSIONS)
        except OSError as e:
            raise TrustConfigError(f"Could not update {config_path}", context=str(e))

    def probe(self, host: str, identity_path: Path) -> ProbeResult:
        """
        Check that GitHub accepts the identity.

        Args:
            host: GitHub host name
            identity_path: Private key to offer

        Returns:
            ProbeResult with the classified outcome and the raw diagnostic text
        """
        result = self.runner.run(
            [
                "ssh",
                "-T",
                "-i",
                str(identity_path),
                "-o",
                "IdentitiesOnly=yes",
                "-o",
                "StrictHostKeyChecking=accept-new",
                "-o",
                f"ConnectTimeout={SSH_CONNECT_TIMEOUT}",
                f"{GITHUB_SSH_USER}@{host}",
            ],
            description=f"Testing SSH connection to {host}",
        )
        output = result.output
        return ProbeResult(
            outcome=classify_probe_output(output), output=output, host=host
        )
