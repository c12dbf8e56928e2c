from pathlib import Path

import pytest

from agent_sandbox.config import SandboxSettings
from agent_sandbox.exceptions import ConfigurationError


class TestDefaults:
    def test_fixed_paths(self, home):
        settings = SandboxSettings.from_env(home=home, environ={})
        assert settings.key_path == home / ".ssh" / "id_ed25519_lucos_agent"
        assert settings.public_key_path == home / ".ssh" / "id_ed25519_lucos_agent.pub"
        assert settings.ssh_config_path == home / ".ssh" / "config"
        assert settings.singleton_path == home / ".claude"
        assert settings.singleton_backup_path == home / ".claude.bak"
        assert settings.sandboxes_dir == home / "sandboxes"

    def test_github_defaults(self, home):
        settings = SandboxSettings.from_env(home=home, environ={})
        assert settings.github_host == "github.com"
        assert settings.github_owner == "lucas42"
        assert settings.singleton_name == "lucos_claude_config"
        assert settings.singleton_url == "git@github.com:lucas42/lucos_claude_config.git"
        assert settings.repo_list_limit == 200
        assert settings.verbose is False


class TestOverrides:
    def test_environment(self, home):
        settings = SandboxSettings.from_env(
            home=home,
            environ={
                "AGENT_SANDBOX_GITHUB_OWNER": "someone",
                "AGENT_SANDBOX_SINGLETON_NAME": "dotclaude",
            },
        )
        assert settings.github_owner == "someone"
        assert settings.singleton_url == "git@github.com:someone/dotclaude.git"
        assert settings.singleton_path == Path(home) / ".claude"

    def test_settings_file(self, home):
        (home / ".agent-sandbox.env").write_text(
            "AGENT_SANDBOX_GITHUB_OWNER=from-file\n"
            "AGENT_SANDBOX_KEY_COMMENT=my-vm\n"
        )
        settings = SandboxSettings.from_env(home=home, environ={})
        assert settings.github_owner == "from-file"
        assert settings.key_comment == "my-vm"

    def test_environment_wins_over_file(self, home):
        (home / ".agent-sandbox.env").write_text("AGENT_SANDBOX_GITHUB_OWNER=from-file\n")
        settings = SandboxSettings.from_env(
            home=home, environ={"AGENT_SANDBOX_GITHUB_OWNER": "from-env"}
        )
        assert settings.github_owner == "from-env"

    def test_explicit_singleton_url(self, home):
        settings = SandboxSettings.from_env(
            home=home,
            environ={"AGENT_SANDBOX_SINGLETON_URL": "git@example.org:me/cfg.git"},
        )
        assert settings.singleton_url == "git@example.org:me/cfg.git"

    def test_blank_values_fall_back_to_defaults(self, home):
        settings = SandboxSettings.from_env(
            home=home, environ={"AGENT_SANDBOX_GITHUB_OWNER": "  "}
        )
        assert settings.github_owner == "lucas42"

    def test_listing_limit(self, home):
        settings = SandboxSettings.from_env(
            home=home, environ={"AGENT_SANDBOX_REPO_LIST_LIMIT": "500"}
        )
        assert settings.repo_list_limit == 500

    @pytest.mark.parametrize("value", ["abc", "0", "-5"])
    def test_invalid_limit(self, home, value):
        with pytest.raises(ConfigurationError):
            SandboxSettings.from_env(
                home=home, environ={"AGENT_SANDBOX_REPO_LIST_LIMIT": value}
            )

    @pytest.mark.parametrize("name", ["AGENT_SANDBOX_VERBOSE", "VERBOSE", "DEBUG"])
    def test_verbose(self, home, name):
        assert SandboxSettings.from_env(home=home, environ={name: "1"}).verbose is True
