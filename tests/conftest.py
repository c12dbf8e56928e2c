from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from agent_sandbox.config import SandboxSettings
from agent_sandbox.core.reconciler import Reconciler
from agent_sandbox.logger import SetupLogger
from agent_sandbox.models.results import ExecutionResult
from agent_sandbox.services import (
    CommandRunner,
    GitHubService,
    GitService,
    IdentityService,
    SSHService,
)

GITHUB_ACCEPTED = (
    "Hi lucas42! You've successfully authenticated, "
    "but GitHub does not provide shell access."
)
GITHUB_REJECTED = "git@github.com: Permission denied (publickey)."


def repo(name: str, archived: bool = False) -> dict:
    return {
        "name": name,
        "sshUrl": f"git@github.com:lucas42/{name}.git",
        "isArchived": archived,
    }


class ScriptedPrompter:
    """Answers confirm() from a script and records every prompt."""

    def __init__(self, answers=None):
        self.answers = list(answers or [])
        self.questions: list[str] = []
        self.acknowledged: list[str] = []

    def confirm(self, question: str, default: bool = False) -> bool:
        self.questions.append(question)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {question}")
        return self.answers.pop(0)

    def acknowledge(self, message: str) -> None:
        self.acknowledged.append(message)


class FakeTools(CommandRunner):
    """
    Stands in for ssh, ssh-keygen, git and gh.

    Each command is answered from in-memory state; clones and key generation
    write real files under the test's temporary home.
    """

    def __init__(self):
        super().__init__(logger=None)
        self.calls: list[list[str]] = []
        self.authenticated = True
        self.login_succeeds = True
        self.probe_output = GITHUB_ACCEPTED
        self.repos: list[dict] = []
        self.list_fails = False
        self.keygen_fails = False
        self.failing_clones: set[str] = set()
        self.failing_pulls: set[str] = set()
        self.missing_tools: set[str] = set()

    def is_installed(self, tool):
        return tool not in self.missing_tools

    def run(self, cmd, cwd=None, env=None, description=None, interactive=False):
        cmd = [str(part) for part in cmd]
        self.calls.append(cmd)
        handler = getattr(self, "_" + cmd[0].replace("-", "_"))
        return handler(cmd)

    def commands(self, *prefix: str) -> list[list[str]]:
        return [c for c in self.calls if c[: len(prefix)] == list(prefix)]

    def _ssh_keygen(self, cmd):
        key = Path(cmd[cmd.index("-f") + 1])
        if "-y" in cmd:
            return ExecutionResult(0, stdout="ssh-ed25519 AAAAderived\n")
        if self.keygen_fails:
            return ExecutionResult(1, stderr="ssh-keygen: unknown key type")
        comment = cmd[cmd.index("-C") + 1]
        key.write_text("PRIVATE KEY\n")
        key.with_name(key.name + ".pub").write_text(f"ssh-ed25519 AAAAnew {comment}\n")
        return ExecutionResult(0)

    def _ssh(self, cmd):
        # ssh -T exits 1 even when GitHub accepts the key
        return ExecutionResult(1, stderr=self.probe_output)

    def _gh(self, cmd):
        sub = cmd[1:3]
        if sub == ["auth", "status"]:
            return ExecutionResult(0 if self.authenticated else 1)
        if sub == ["auth", "login"]:
            if self.login_succeeds:
                self.authenticated = True
                return ExecutionResult(0)
            return ExecutionResult(1)
        if sub == ["repo", "list"]:
            if self.list_fails:
                return ExecutionResult(1, stderr="HTTP 401: Bad credentials")
            return ExecutionResult(0, stdout=json.dumps(self.repos))
        raise AssertionError(f"Unexpected gh command: {cmd}")

    def _git(self, cmd):
        if cmd[1] == "clone":
            url, dest = cmd[2], Path(cmd[3])
            if url in self.failing_clones:
                return ExecutionResult(128, stderr=f"fatal: could not read from {url}")
            (dest / ".git").mkdir(parents=True)
            (dest / "README.md").write_text(url)
            return ExecutionResult(0)
        if cmd[1] == "-C" and cmd[3:] == ["pull", "--ff-only"]:
            if cmd[2] in self.failing_pulls:
                return ExecutionResult(
                    128, stderr="fatal: Not possible to fast-forward, aborting."
                )
            return ExecutionResult(0, stdout="Already up to date.")
        raise AssertionError(f"Unexpected git command: {cmd}")


def make_reconciler(settings, logger, prompter, tools: FakeTools) -> Reconciler:
    return Reconciler(
        settings,
        logger,
        prompter,
        identity_service=IdentityService(tools),
        ssh_service=SSHService(tools),
        github_service=GitHubService(tools),
        git_service=GitService(tools),
        runner=tools,
    )


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def settings(home: Path) -> SandboxSettings:
    return SandboxSettings(home=home)


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=120, color_system=None)


@pytest.fixture
def logger(tmp_path: Path, console: Console):
    log = SetupLogger(tmp_path / "logs", "test", console=console)
    yield log
    log.close()


@pytest.fixture
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter()


@pytest.fixture
def tools() -> FakeTools:
    return FakeTools()


@pytest.fixture
def reconciler(settings, logger, prompter, tools) -> Reconciler:
    return make_reconciler(settings, logger, prompter, tools)
