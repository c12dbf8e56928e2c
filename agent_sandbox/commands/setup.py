"""Agent Sandbox - setup command"""

from typing import Optional

import rich_click as click
from rich.console import Console

from agent_sandbox.base import BaseCommand
from agent_sandbox.config import SandboxSettings
from agent_sandbox.core import Reconciler, RunReport
from agent_sandbox.prompts import ConsolePrompter, Prompter
from agent_sandbox.ui_components import show_summary
from agent_sandbox.utils import display_path


class SetupCommand(BaseCommand):
    """Provision the SSH identity, GitHub session and repository checkouts."""

    def __init__(
        self,
        settings: SandboxSettings,
        prompter: Optional[Prompter] = None,
        console: Optional[Console] = None,
        reconciler_factory=Reconciler,
    ):
        super().__init__(verbose=settings.verbose, console=console)
        self.settings = settings
        self.prompter = prompter or ConsolePrompter(self.console)
        self.reconciler_factory = reconciler_factory
        self.report: Optional[RunReport] = None

    def execute(self) -> None:
        settings = self.settings
        self.show_header(
            "Repository Setup",
            subtitle="lucOS agent coding sandbox",
            details={
                "Owner": settings.github_owner,
                "Config repo": settings.singleton_name,
            },
        )

        logger = self.init_logger(settings.log_dir, "setup")
        with logger:
            reconciler = self.reconciler_factory(settings, logger, self.prompter)
            try:
                self.report = reconciler.run()
            except Exception:
                logger.log(f"Run halted at state: {reconciler.state.value}", "ERROR")
                raise

        home = settings.home
        show_summary(
            self.report.fleet,
            {
                display_path(settings.singleton_path, home): (
                    f"{settings.singleton_name} (agent config + personas)"
                ),
                display_path(settings.sandboxes_dir, home) + "/": (
                    f"all other {settings.github_owner} repositories"
                ),
                display_path(settings.key_path, home): "SSH key for GitHub",
            },
            console=self.console,
        )
        if not self.report.made_changes:
            self.print_dim("Nothing to create: everything was already in place.")
        self.print_success("Setup complete")
        self.print_dim(f"Log: {logger.log_path}")


@click.command(name="setup")
def setup():
    """
    Set up SSH, the GitHub CLI and repository checkouts inside the VM.

    \b
    Steps:
      1. Generate an Ed25519 SSH key (kept if it already exists)
      2. Route github.com through that key in ~/.ssh/config
      3. Test the SSH connection to GitHub
      4. Authenticate the GitHub CLI (device code flow)
      5. Clone the config repository to ~/.claude
      6. Clone or update every non-archived repository under ~/sandboxes/

    Safe to re-run: completed steps are skipped.
    """
    settings = SandboxSettings.from_env()
    SetupCommand(settings).run()
