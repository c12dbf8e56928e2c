"""
Agent Sandbox Services Layer

Thin wrappers around the external tools the setup drives.
"""

from .runner import CommandRunner
from .identity_service import IdentityService
from .ssh_service import SSHService
from .github_service import GitHubService
from .git_service import GitService

__all__ = [
    "CommandRunner",
    "IdentityService",
    "SSHService",
    "GitHubService",
    "GitService",
]
