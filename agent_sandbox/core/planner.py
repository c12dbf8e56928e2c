"""
Reconciliation planner

Pure functions that compare desired state with an observed snapshot and
return the actions needed to converge. Nothing here runs a tool or writes to
disk; observe_checkout() is the only filesystem read.
"""

import os
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from agent_sandbox.models.actions import Action, ActionKind
from agent_sandbox.models.repos import CheckoutState, RepoEntry
from agent_sandbox.models.ssh import SSHIdentity, TrustEntry


def observe_checkout(path: Path) -> CheckoutState:
    """`<path>/.git` is the only signal that a checkout exists."""
    if (path / ".git").exists():
        return CheckoutState.REPOSITORY
    # A symlink cannot be cloned over, dangling or not
    if path.is_symlink():
        return CheckoutState.OCCUPIED
    if not path.exists():
        return CheckoutState.ABSENT
    if path.is_dir() and not any(path.iterdir()):
        return CheckoutState.EMPTY
    return CheckoutState.OCCUPIED


def next_backup_path(
    preferred: Path, exists: Callable[[Path], bool] = os.path.lexists
) -> Path:
    """First of preferred, preferred.1, preferred.2, ... that is free."""
    candidate = preferred
    index = 1
    while exists(candidate):
        candidate = preferred.with_name(f"{preferred.name}.{index}")
        index += 1
    return candidate


# -------------------------
# ~/.ssh/config parsing
# -------------------------


def _host_patterns(line: str) -> Optional[List[str]]:
    tokens = line.split()
    if tokens and tokens[0].lower() == "host":
        return tokens[1:]
    return None


def has_host_entry(config_text: Optional[str], host: str) -> bool:
    """Whether a `Host` marker line names host."""
    if not config_text:
        return False
    for line in config_text.splitlines():
        patterns = _host_patterns(line)
        if patterns and host in patterns:
            return True
    return False


def host_identity_files(config_text: Optional[str], host: str) -> List[str]:
    """IdentityFile values declared inside the Host blocks that name host."""
    files: List[str] = []
    in_block = False
    for line in (config_text or "").splitlines():
        tokens = line.split(None, 1)
        if not tokens:
            continue
        keyword = tokens[0].lower()
        if keyword in ("host", "match"):
            in_block = keyword == "host" and host in (_host_patterns(line) or [])
        elif in_block and keyword == "identityfile" and len(tokens) == 2:
            files.append(tokens[1].strip().strip('"'))
    return files


def _expand_home(value: str, home: Path) -> str:
    if value == "~" or value.startswith("~/"):
        return str(home) + value[1:]
    return value


def entry_uses_identity(
    config_text: Optional[str], host: str, identity_path: Path, home: Path
) -> bool:
    """Whether a Host block for host lists identity_path; `~` means home."""
    wanted = os.path.normpath(str(identity_path))
    return any(
        os.path.normpath(_expand_home(value, home)) == wanted
        for value in host_identity_files(config_text, host)
    )


# -------------------------
# Planners
# -------------------------


def plan_identity(
    identity: SSHIdentity, key_exists: bool, public_key_exists: bool
) -> List[Action]:
    """An existing private key is never regenerated."""
    if not key_exists:
        return [
            Action(ActionKind.GENERATE_KEYPAIR, "ssh-key", identity.key_path)
        ]
    if not public_key_exists:
        return [
            Action(
                ActionKind.DERIVE_PUBLIC_KEY,
                "ssh-key",
                identity.public_key_path,
                reason="public key missing",
            )
        ]
    return [
        Action(ActionKind.SKIP, "ssh-key", identity.key_path, reason="already exists")
    ]


def plan_trust_entry(
    config_text: Optional[str], config_path: Path, entry: TrustEntry
) -> List[Action]:
    """Append the Host block unless a marker line for the host is present."""
    if has_host_entry(config_text, entry.host):
        return [
            Action(
                ActionKind.SKIP,
                f"ssh-config:{entry.host}",
                config_path,
                reason=f"already has a {entry.host} entry",
            )
        ]
    return [
        Action(
            ActionKind.APPEND_TRUST_ENTRY,
            f"ssh-config:{entry.host}",
            config_path,
            source=entry.render(),
        )
    ]


def plan_singleton(
    state: CheckoutState, local_path: Path, remote_url: str, backup_path: Path
) -> List[Action]:
    """
    Decision table for the configuration repository.

    REPOSITORY -> pull; OCCUPIED -> move aside then clone;
    ABSENT or EMPTY -> clone.
    """
    resource = local_path.name
    if state == CheckoutState.REPOSITORY:
        return [Action(ActionKind.PULL, resource, local_path, source=remote_url)]
    actions = []
    if state == CheckoutState.OCCUPIED:
        actions.append(
            Action(
                ActionKind.MOVE_ASIDE,
                resource,
                local_path,
                destination=backup_path,
                reason="exists and is not a git repository",
            )
        )
    actions.append(Action(ActionKind.CLONE, resource, local_path, source=remote_url))
    return actions


def _unsafe_name(name: str) -> bool:
    return name in ("", ".", "..") or "/" in name or "\\" in name


def plan_fleet(
    entries: Iterable[RepoEntry],
    base_dir: Path,
    singleton_name: str,
    is_checkout: Callable[[Path], bool],
) -> List[Action]:
    """
    One action per non-archived repository, in listing order.

    Archived repositories produce no action. The singleton is matched by name
    and skipped, since it already lives at its own fixed path.
    """
    actions: List[Action] = []
    for entry in entries:
        if entry.archived:
            continue
        target = base_dir / entry.name
        if entry.name == singleton_name:
            actions.append(
                Action(
                    ActionKind.SKIP,
                    entry.name,
                    target,
                    source=entry.ssh_url,
                    reason="configuration repository",
                )
            )
        elif _unsafe_name(entry.name):
            actions.append(
                Action(
                    ActionKind.SKIP,
                    entry.name,
                    base_dir,
                    source=entry.ssh_url,
                    reason="unusable directory name",
                )
            )
        elif is_checkout(target):
            actions.append(
                Action(ActionKind.PULL, entry.name, target, source=entry.ssh_url)
            )
        else:
            actions.append(
                Action(ActionKind.CLONE, entry.name, target, source=entry.ssh_url)
            )
    return actions
