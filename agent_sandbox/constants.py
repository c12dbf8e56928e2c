"""
Agent Sandbox Constants

Centralized constants for fixed paths, defaults and tool policies.
"""

# GitHub
DEFAULT_GITHUB_HOST = "github.com"
DEFAULT_GITHUB_OWNER = "lucas42"
GITHUB_SSH_USER = "git"
GITHUB_KEYS_URL = "https://github.com/settings/keys"
REPO_LIST_LIMIT = 200

# SSH identity (relative to $HOME)
SSH_DIR_NAME = ".ssh"
SSH_KEY_NAME = "id_ed25519_lucos_agent"
SSH_KEY_TYPE = "ed25519"
SSH_CONFIG_NAME = "config"
DEFAULT_KEY_COMMENT = "lucos-agent-coding-sandbox"
SSH_CONNECT_TIMEOUT = 10

# Singleton configuration repository
DEFAULT_SINGLETON_NAME = "lucos_claude_config"
SINGLETON_DIR_NAME = ".claude"
SINGLETON_BACKUP_SUFFIX = ".bak"

# Fleet checkouts
SANDBOXES_DIR_NAME = "sandboxes"

# Logs (relative to $HOME)
LOG_DIR = ".local/state/agent-sandbox/logs"
LOG_DATE_FORMAT = "%Y-%m-%d"
LOG_TIME_FORMAT = "%H-%M-%S"

# Optional settings file (relative to $HOME)
SETTINGS_FILE_NAME = ".agent-sandbox.env"
ENV_PREFIX = "AGENT_SANDBOX_"

# Text patterns for tools that only signal success in their output
SSH_ACCEPTED_PATTERN = "successfully authenticated"
SSH_REJECTED_PATTERN = "Permission denied"

# File Permissions
SSH_DIR_PERMISSIONS = 0o700
SSH_CONFIG_PERMISSIONS = 0o600

# Tool names
REQUIRED_TOOLS = [
    "ssh",
    "ssh-keygen",
    "git",
    "gh",
]
