"""
Reconciler

Drives the setup steps in order. Each step observes the current state,
asks the planner for actions and applies them. Re-running after a partial
run turns every satisfied step into a skip, so the run effectively resumes
at the first unsatisfied step.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from agent_sandbox.config import SandboxSettings
from agent_sandbox.constants import GITHUB_KEYS_URL, GITHUB_SSH_USER, REQUIRED_TOOLS
from agent_sandbox.core.planner import (
    entry_uses_identity,
    next_backup_path,
    observe_checkout,
    plan_fleet,
    plan_identity,
    plan_singleton,
    plan_trust_entry,
)
from agent_sandbox.core.steps import SETUP_STEPS, RunState, Step
from agent_sandbox.exceptions import (
    AuthenticationError,
    MissingToolError,
    OperatorAbort,
    RepositorySyncError,
)
from agent_sandbox.logger import SetupLogger
from agent_sandbox.models.actions import Action, ActionKind
from agent_sandbox.models.results import FleetSummary, ToolOutcome
from agent_sandbox.models.ssh import SSHIdentity, TrustEntry
from agent_sandbox.prompts import Prompter
from agent_sandbox.services import (
    CommandRunner,
    GitHubService,
    GitService,
    IdentityService,
    SSHService,
)
from agent_sandbox.ui_components import show_public_key
from agent_sandbox.utils import display_path


@dataclass
class RunReport:
    """What a run did."""

    state: RunState = RunState.START
    changes: List[str] = field(default_factory=list)
    fleet: FleetSummary = field(default_factory=FleetSummary)
    identity_created: bool = False
    session_created: bool = False

    @property
    def made_changes(self) -> bool:
        return bool(self.changes)


class Reconciler:
    """Converges the VM towards the desired settings, one step at a time."""

    def __init__(
        self,
        settings: SandboxSettings,
        logger: SetupLogger,
        prompter: Prompter,
        identity_service: Optional[IdentityService] = None,
        ssh_service: Optional[SSHService] = None,
        github_service: Optional[GitHubService] = None,
        git_service: Optional[GitService] = None,
        console: Optional[Console] = None,
        runner: Optional[CommandRunner] = None,
    ):
        self.settings = settings
        self.logger = logger
        self.prompter = prompter
        self.console = console if console is not None else logger.console

        self.runner = runner or CommandRunner(logger)
        self.identity_service = identity_service or IdentityService(self.runner)
        self.ssh_service = ssh_service or SSHService(self.runner)
        self.github_service = github_service or GitHubService(self.runner)
        self.git_service = git_service or GitService(self.runner)

        self.report = RunReport()

    @property
    def state(self) -> RunState:
        return self.report.state

    # -------------------------
    # Driver
    # -------------------------

    def run(self) -> RunReport:
        """
        Run every step in order.

        Returns:
            RunReport with state DONE

        Raises:
            SandboxSetupError: From the first step that cannot be resolved;
                report.state is left at the last state reached
        """
        self.check_tools()

        handlers: Dict[str, Callable[[], Optional[RunState]]] = {
            "identity": self._identity_step,
            "trust": self._trust_step,
            "connectivity": self._connectivity_step,
            "session": self._session_step,
            "singleton": self._singleton_step,
            "fleet": self._fleet_step,
        }

        completed: Set[str] = set()
        for step in SETUP_STEPS:
            self._check_dependencies(step, completed)
            self.logger.step(step.title)
            reached = handlers[step.name]()
            self.report.state = reached or step.reaches
            self.logger.log(f"State: {self.report.state.value}", "DEBUG")
            completed.add(step.name)

        self.report.state = RunState.DONE
        return self.report

    def check_tools(self) -> None:
        """
        Fail before any change or prompt if an external tool is missing.

        Raises:
            MissingToolError: For the first tool not on PATH
        """
        for tool in REQUIRED_TOOLS:
            if not self.runner.is_installed(tool):
                raise MissingToolError(tool)
            self.logger.log(f"Found {tool}", "DEBUG")

    def _check_dependencies(self, step: Step, completed: Set[str]) -> None:
        missing = [name for name in step.depends_on if name not in completed]
        if missing:
            raise RuntimeError(
                f"Step '{step.name}' cannot run before {', '.join(missing)}"
            )

    def _record(self, action: Action) -> None:
        self.logger.log(f"Action: {action.describe()}", "DEBUG")
        if action.is_change:
            self.report.changes.append(action.describe())

    def _identity_step(self) -> None:
        public_key, created = self.ensure_identity(self.settings.key_path)
        self.report.identity_created = created
        self.register_identity(public_key)

    def _trust_step(self) -> None:
        self.ensure_trust_entry(
            self.settings.ssh_config_path,
            self.settings.github_host,
            self.settings.key_path,
        )

    def _connectivity_step(self) -> Optional[RunState]:
        outcome = self.probe(self.settings.github_host, self.settings.key_path)
        if outcome != ToolOutcome.SUCCESS:
            return RunState.OPERATOR_OVERRIDE
        return None

    def _session_step(self) -> None:
        self.report.session_created = self.ensure_session(self.settings.github_host)

    def _singleton_step(self) -> None:
        self.ensure_singleton(self.settings.singleton_path, self.settings.singleton_url)

    def _fleet_step(self) -> None:
        self.report.fleet = self.sync_fleet(
            self.settings.github_owner, self.settings.sandboxes_dir
        )

    # -------------------------
    # Identity
    # -------------------------

    def ensure_identity(self, path: Path) -> Tuple[str, bool]:
        """
        Make sure a keypair exists at path.

        Returns:
            (public key text, whether a new keypair was generated)
        """
        identity = SSHIdentity(key_path=path, comment=self.settings.key_comment)
        self.identity_service.ensure_ssh_dir(path.parent)

        created = False
        for action in plan_identity(
            identity, identity.key_exists, identity.public_key_exists
        ):
            self._record(action)
            if action.kind == ActionKind.GENERATE_KEYPAIR:
                self.logger.info("Generating new Ed25519 SSH key...")
                self.identity_service.generate(identity)
                self.logger.success(f"Key generated at {self._show(path)}")
                created = True
            elif action.kind == ActionKind.DERIVE_PUBLIC_KEY:
                self.identity_service.derive_public_key(identity)
                self.logger.warning(
                    f"Public key was missing; rewrote {self._show(identity.public_key_path)}"
                )
            else:
                self.logger.success(
                    f"SSH key already exists at {self._show(path)} -- skipping generation"
                )

        return self.identity_service.read_public_key(identity), created

    def register_identity(self, public_key: str) -> None:
        """Show the public key and wait until the operator has added it to GitHub."""
        show_public_key(
            public_key,
            key_title=self.settings.key_comment,
            keys_url=GITHUB_KEYS_URL,
            console=self.console,
        )
        self.prompter.acknowledge("Press Enter once you have added the key to GitHub...")
        self.logger.log("Operator acknowledged key registration")

    # -------------------------
    # Trust entry
    # -------------------------

    def ensure_trust_entry(self, config_path: Path, host: str, identity_path: Path) -> bool:
        """
        Route host through the identity in ~/.ssh/config.

        An existing entry for host is left as it is, even if it points at a
        different key; that case is only reported.

        Returns:
            True if a block was appended
        """
        config_text = self.ssh_service.read_config(config_path)
        entry = TrustEntry(
            host=host,
            user=GITHUB_SSH_USER,
            identity_file=self._show(identity_path),
        )

        appended = False
        for action in plan_trust_entry(config_text, config_path, entry):
            self._record(action)
            if action.kind == ActionKind.APPEND_TRUST_ENTRY:
                self.ssh_service.append_entry(config_path, entry)
                self.logger.success("SSH config updated")
                appended = True
            else:
                self.logger.success(
                    f"SSH config already has a {host} entry -- skipping"
                )
                if not entry_uses_identity(
                    config_text, host, identity_path, self.settings.home
                ):
                    self.logger.warning(
                        f"The existing {host} entry does not use {self._show(identity_path)}; "
                        "if the key was reset, remove that block and re-run"
                    )
        return appended

    # -------------------------
    # Connectivity
    # -------------------------

    def probe(self, host: str, identity: Path) -> ToolOutcome:
        """
        Test that host accepts the identity.

        A non-matching result does not fail the run by itself; the operator
        decides whether to continue.

        Raises:
            OperatorAbort: If the operator declines to continue
        """
        result = self.ssh_service.probe(host, identity)

        if result.is_verified:
            self.logger.success("GitHub SSH authentication successful")
            return result.outcome

        self.console.print(
            Panel(
                escape(result.output or "(no output)"),
                title="ssh output",
                title_align="left",
                border_style="dim",
            )
        )
        self.logger.warning(
            "GitHub SSH test did not return the expected success message"
        )
        self.console.print(
            "[yellow]The key may not have been saved correctly, or GitHub may be slow to\n"
            "propagate the new key. If cloning fails below, check the key on\n"
            f"{GITHUB_KEYS_URL} and re-run this command.[/yellow]"
        )

        if not self.prompter.confirm("Continue anyway?", default=False):
            raise OperatorAbort(f"SSH connectivity to {host} could not be verified")

        self.logger.log(f"Operator chose to continue ({result.outcome.value})", "WARNING")
        return result.outcome

    # -------------------------
    # Session
    # -------------------------

    def ensure_session(self, host: str) -> bool:
        """
        Make sure the gh CLI is authenticated for host.

        Returns:
            True if a new session was created

        Raises:
            AuthenticationError: If the device-code flow does not succeed
        """
        if self.github_service.auth_status(host) == ToolOutcome.SUCCESS:
            self.logger.success("GitHub CLI already authenticated")
            return False

        self.console.print(
            "\nThis will use a device code flow.\n"
            "A URL and one-time code will be shown below.\n"
            "Open the URL in a browser on your host machine and enter the code.\n"
        )
        self.report.changes.append(f"gh auth login --hostname {host}")

        if self.github_service.login(host) != ToolOutcome.SUCCESS:
            raise AuthenticationError(
                f"GitHub CLI login for {host} did not complete",
                context="Re-run this command to start a new device code flow",
            )
        if self.github_service.auth_status(host) != ToolOutcome.SUCCESS:
            raise AuthenticationError(
                f"GitHub CLI is still not authenticated for {host}",
                context="Check `gh auth status` and re-run this command",
            )

        self.logger.success("GitHub CLI authenticated")
        return True

    # -------------------------
    # Singleton repository
    # -------------------------

    def ensure_singleton(self, local_path: Path, remote_url: str) -> List[Action]:
        """
        Make sure the configuration repository is checked out at local_path.

        Returns:
            Actions applied

        Raises:
            RepositorySyncError: If the clone or the move aside fails
        """
        state = observe_checkout(local_path)
        backup_path = next_backup_path(self.settings.singleton_backup_path)
        actions = plan_singleton(state, local_path, remote_url, backup_path)
        shown = self._show(local_path)

        for action in actions:
            self._record(action)
            if action.kind == ActionKind.PULL:
                self.logger.info(f"{shown} already has a git repo -- pulling latest")
                if self.git_service.pull_ff_only(local_path).is_success:
                    self.logger.success(f"{shown} is up to date")
                else:
                    self.logger.warning("Could not fast-forward, skipping pull")
            elif action.kind == ActionKind.MOVE_ASIDE:
                self.logger.warning(
                    f"{shown} exists and is non-empty but is not a git repo; "
                    f"moving it to {self._show(action.destination)}"
                )
                try:
                    os.rename(local_path, action.destination)
                except OSError as e:
                    raise RepositorySyncError(
                        f"Could not move {local_path} aside", context=str(e)
                    )
            elif action.kind == ActionKind.CLONE:
                result = self.git_service.clone(remote_url, local_path)
                if result.is_failure:
                    raise RepositorySyncError(
                        f"Could not clone {remote_url} into {local_path}",
                        context=result.stderr.strip() or f"exit code {result.returncode}",
                    )
                self.logger.success(f"{self.settings.singleton_name} cloned to {shown}")

        return actions

    # -------------------------
    # Fleet
    # -------------------------

    def sync_fleet(self, owner: str, base_dir: Path) -> FleetSummary:
        """
        Clone or update every non-archived repository of owner under base_dir.

        A failure on one repository is logged and counted; the loop always
        carries on with the next one.

        Raises:
            RepositorySyncError: If the repository listing itself fails
        """
        entries = self.github_service.list_repos(owner, self.settings.repo_list_limit)
        actions = plan_fleet(
            entries,
            base_dir,
            self.settings.singleton_name,
            lambda path: (path / ".git").exists(),
        )
        self.logger.info(f"Found {len(actions)} non-archived repositories")

        base_dir.mkdir(parents=True, exist_ok=True)
        summary = FleetSummary()

        for action in actions:
            self._record(action)
            name = action.resource

            if action.kind == ActionKind.SKIP:
                self.logger.info(f"[skip] {name} ({action.reason})")
                summary.skipped += 1

            elif action.kind == ActionKind.PULL:
                self.logger.info(f"[pull] {name}")
                try:
                    pulled = self.git_service.pull_ff_only(action.target).is_success
                except OSError as e:
                    self.logger.log(f"Pull of {name} raised: {e}", "ERROR")
                    pulled = False
                if not pulled:
                    self.logger.warning(f"{name}: could not fast-forward, skipping pull")
                    summary.not_fast_forwarded.append(name)
                summary.updated += 1

            elif action.kind == ActionKind.CLONE:
                self.logger.info(f"[clone] {name}")
                try:
                    cloned = self.git_service.clone(action.source, action.target).is_success
                except OSError as e:
                    self.logger.log(f"Clone of {name} raised: {e}", "ERROR")
                    cloned = False
                if cloned:
                    summary.cloned += 1
                else:
                    self.logger.warning(f"Clone failed for {name}")
                    summary.failed += 1
                    summary.failed_names.append(name)

        self.logger.log(f"Fleet summary: {summary!r}")
        return summary

    def _show(self, path: Path) -> str:
        return display_path(path, self.settings.home)
