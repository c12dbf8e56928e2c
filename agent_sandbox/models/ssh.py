"""
SSH Configuration Models

Dataclass models for the managed identity and its ~/.ssh/config entry.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass
class SSHIdentity:
    """Keypair at the canonical location."""

    key_path: Path
    comment: str

    @property
    def public_key_path(self) -> Path:
        return self.key_path.with_name(self.key_path.name + ".pub")

    @property
    def key_exists(self) -> bool:
        """Check if private key file exists."""
        return self.key_path.exists()

    @property
    def public_key_exists(self) -> bool:
        """Check if public key file exists."""
        return self.public_key_path.exists()

    def __repr__(self) -> str:
        return f"SSHIdentity(key={self.key_path})"


@dataclass
class TrustEntry:
    """A `Host` block routing one remote host through the managed identity."""

    host: str
    user: str
    identity_file: str
    hostname: str = ""

    def render(self) -> str:
        """Render the block as appended to ~/.ssh/config."""
        return (
            f"\nHost {self.host}\n"
            f"    HostName {self.hostname or self.host}\n"
            f"    User {self.user}\n"
            f"    IdentityFile {self.identity_file}\n"
            f"    IdentitiesOnly yes\n"
        )

    def __repr__(self) -> str:
        return f"TrustEntry(host={self.host}, user={self.user})"
