"""
Agent Sandbox Exception Hierarchy

Every fatal step failure derives from SandboxSetupError so the command layer
can report it and exit non-zero.
"""

from typing import Optional


class SandboxSetupError(Exception):
    """Base exception for all setup errors."""

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class ConfigurationError(SandboxSetupError):
    """Raised when settings are invalid."""

    pass


class MissingToolError(SandboxSetupError):
    """Raised when a required external tool is not installed."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(
            f"Required tool '{tool}' was not found on PATH",
            context="Install it inside the VM and re-run this command",
        )


class IdentityError(SandboxSetupError):
    """Raised when the SSH keypair cannot be generated or read."""

    pass


class TrustConfigError(SandboxSetupError):
    """Raised when the SSH config file cannot be updated."""

    pass


class AuthenticationError(SandboxSetupError):
    """Raised when the GitHub CLI session cannot be established."""

    pass


class RepositorySyncError(SandboxSetupError):
    """Raised when a required repository operation fails."""

    pass


class OperatorAbort(SandboxSetupError):
    """Raised when the operator declines to continue."""

    def __init__(self, reason: str):
        super().__init__("Aborted by operator", context=reason)
