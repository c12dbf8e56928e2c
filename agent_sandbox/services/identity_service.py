"""SSH keypair generation via ssh-keygen."""

import os
import shutil
import tempfile
from pathlib import Path

from agent_sandbox.constants import SSH_DIR_PERMISSIONS, SSH_KEY_TYPE
from agent_sandbox.exceptions import IdentityError
from agent_sandbox.models.ssh import SSHIdentity
from agent_sandbox.services.runner import CommandRunner


class IdentityService:
    """
    Creates and reads the managed keypair.

    ssh-keygen success is judged by exit code. New keys are written into a
    temporary directory beside the target and moved into place public key
    first, private key last, so the private key only appears once the pair
    is complete.
    """

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def ensure_ssh_dir(self, ssh_dir: Path) -> None:
        """Create ~/.ssh if needed and restrict it to the owner."""
        try:
            ssh_dir.mkdir(parents=True, exist_ok=True)
            os.chmod(ssh_dir, SSH_DIR_PERMISSIONS)
        except OSError as e:
            raise IdentityError(f"Could not prepare {ssh_dir}", context=str(e))

    def generate(self, identity: SSHIdentity) -> None:
        """
        Generate a passphrase-less Ed25519 keypair at the identity path.

        Args:
            identity: Target identity

        Raises:
            IdentityError: If ssh-keygen fails or the files cannot be moved
            MissingToolError: If ssh-keygen is not installed
        """
        key_dir = identity.key_path.parent
        tmp_dir = Path(tempfile.mkdtemp(prefix=".keygen-", dir=key_dir))
        tmp_key = tmp_dir / identity.key_path.name
        tmp_pub = tmp_key.with_name(tmp_key.name + ".pub")

        try:
            result = self.runner.run(
                [
                    "ssh-keygen",
                    "-q",
                    "-t",
                    SSH_KEY_TYPE,
                    "-C",
                    identity.comment,
                    "-f",
                    str(tmp_key),
                    "-N",
                    "",
                ],
                description="Generating Ed25519 key",
            )
            if result.is_failure or not tmp_key.exists() or not tmp_pub.exists():
                raise IdentityError(
                    "ssh-keygen failed to generate the keypair",
                    context=result.output or f"exit code {result.returncode}",
                )

            try:
                os.replace(tmp_pub, identity.public_key_path)
                os.replace(tmp_key, identity.key_path)
            except OSError as e:
                raise IdentityError("Could not install the new keypair", context=str(e))
        finally:
            shutil.rmtree(tmp_dir, ignore_errors=True)

    def derive_public_key(self, identity: SSHIdentity) -> None:
        """Rewrite a missing .pub file from the existing private key."""
        result = self.runner.run(["ssh-keygen", "-y", "-f", str(identity.key_path)])
        public_key = result.stdout.strip()
        if result.is_failure or not public_key:
            raise IdentityError(
                f"Could not derive the public key from {identity.key_path}",
                context=result.output or f"exit code {result.returncode}",
            )

        if identity.comment and len(public_key.split()) == 2:
            public_key = f"{public_key} {identity.comment}"

        tmp_path = identity.public_key_path.with_name(
            identity.public_key_path.name + ".tmp"
        )
        try:
            tmp_path.write_text(public_key + "\n", encoding="utf-8")
            os.replace(tmp_path, identity.public_key_path)
        except OSError as e:
            raise IdentityError(
                f"Could not write {identity.public_key_path}", context=str(e)
            )

    def read_public_key(self, identity: SSHIdentity) -> str:
        try:
            return identity.public_key_path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise IdentityError(
                f"Could not read {identity.public_key_path}", context=str(e)
            )
