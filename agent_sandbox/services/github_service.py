"""GitHub CLI (gh) wrapper: session status, device-code login, repository listing."""

import json
from typing import List

from agent_sandbox.exceptions import RepositorySyncError
from agent_sandbox.models.repos import RepoEntry
from agent_sandbox.models.results import ToolOutcome
from agent_sandbox.services.runner import CommandRunner

LISTING_FIELDS = "name,sshUrl,isArchived"


class GitHubService:
    """
    Service for gh CLI operations.

    All gh subcommands used here report success through their exit code.
    """

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def auth_status(self, host: str) -> ToolOutcome:
        """Check whether gh holds a valid session for the host."""
        result = self.runner.run(["gh", "auth", "status", "--hostname", host])
        return result.outcome

    def login(self, host: str) -> ToolOutcome:
        """
        Run the interactive device-code login.

        gh prints a URL and one-time code and blocks until the operator
        completes the flow in a browser elsewhere. Git operations are set to
        use SSH so clones go through the managed identity.
        """
        result = self.runner.run(
            ["gh", "auth", "login", "--git-protocol", "ssh", "--hostname", host],
            interactive=True,
        )
        return result.outcome

    def list_repos(self, owner: str, limit: int) -> List[RepoEntry]:
        """
        List the owner's repositories, archived ones included.

        Args:
            owner: User or organisation
            limit: Maximum number of repositories to return

        Returns:
            Repository entries in listing order

        Raises:
            RepositorySyncError: If gh fails or returns unexpected output
        """
        result = self.runner.run(
            [
                "gh",
                "repo",
                "list",
                owner,
                "--limit",
                str(limit),
                "--json",
                LISTING_FIELDS,
            ],
            description=f"Fetching repositories for {owner}",
        )
        if result.is_failure:
            raise RepositorySyncError(
                f"Could not list repositories for {owner}",
                context=result.stderr.strip() or f"exit code {result.returncode}",
            )

        return parse_listing(result.stdout)


def parse_listing(payload: str) -> List[RepoEntry]:
    """Parse `gh repo list --json` output; empty output means no repositories."""
    if not payload.strip():
        return []
    try:
        records = json.loads(payload)
        if not isinstance(records, list):
            raise ValueError("expected a JSON array")
        return [RepoEntry.from_listing(record) for record in records]
    except (ValueError, KeyError, TypeError) as e:
        raise RepositorySyncError(
            "Unexpected output from gh repo list", context=str(e)
        )
