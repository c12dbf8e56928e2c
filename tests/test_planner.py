"""Unit tests for the pure reconciliation planner - no tools, no network."""

from pathlib import Path

import pytest

from agent_sandbox.core.planner import (
    entry_uses_identity,
    has_host_entry,
    host_identity_files,
    next_backup_path,
    observe_checkout,
    plan_fleet,
    plan_identity,
    plan_singleton,
    plan_trust_entry,
)
from agent_sandbox.models import ActionKind, CheckoutState, RepoEntry, SSHIdentity, TrustEntry

KEY = Path("/home/agent/.ssh/id_ed25519_lucos_agent")
BASE = Path("/home/agent/sandboxes")

CONFIG_WITH_GITHUB = """\
Host example.org
    User me

Host github.com
    HostName github.com
    User git
    IdentityFile /home/agent/.ssh/id_ed25519_lucos_agent
    IdentitiesOnly yes
"""


def entries(*names, archived=()):
    return [
        RepoEntry(name=n, ssh_url=f"git@github.com:lucas42/{n}.git", archived=n in archived)
        for n in names
    ]


# ── observe_checkout ─────────────────────────────────────────────────────


class TestObserveCheckout:
    def test_absent(self, tmp_path):
        assert observe_checkout(tmp_path / "missing") == CheckoutState.ABSENT

    def test_empty_directory(self, tmp_path):
        (tmp_path / "empty").mkdir()
        assert observe_checkout(tmp_path / "empty") == CheckoutState.EMPTY

    def test_repository(self, tmp_path):
        (tmp_path / "repo" / ".git").mkdir(parents=True)
        assert observe_checkout(tmp_path / "repo") == CheckoutState.REPOSITORY

    def test_occupied_directory(self, tmp_path):
        (tmp_path / "stuff").mkdir()
        (tmp_path / "stuff" / "notes.md").write_text("mine")
        assert observe_checkout(tmp_path / "stuff") == CheckoutState.OCCUPIED

    def test_plain_file_is_occupied(self, tmp_path):
        (tmp_path / "file").write_text("x")
        assert observe_checkout(tmp_path / "file") == CheckoutState.OCCUPIED

    def test_dangling_symlink_is_occupied(self, tmp_path):
        (tmp_path / "link").symlink_to(tmp_path / "gone")
        assert observe_checkout(tmp_path / "link") == CheckoutState.OCCUPIED

    def test_symlink_to_empty_directory_is_occupied(self, tmp_path):
        (tmp_path / "empty").mkdir()
        (tmp_path / "link").symlink_to(tmp_path / "empty")
        assert observe_checkout(tmp_path / "link") == CheckoutState.OCCUPIED

    def test_symlink_to_repository(self, tmp_path):
        (tmp_path / "repo" / ".git").mkdir(parents=True)
        (tmp_path / "link").symlink_to(tmp_path / "repo")
        assert observe_checkout(tmp_path / "link") == CheckoutState.REPOSITORY


# ── next_backup_path ─────────────────────────────────────────────────────


class TestNextBackupPath:
    def test_preferred_when_free(self):
        assert next_backup_path(Path("/h/.claude.bak"), exists=lambda p: False) == Path(
            "/h/.claude.bak"
        )

    def test_numbered_when_taken(self):
        taken = {Path("/h/.claude.bak"), Path("/h/.claude.bak.1")}
        assert next_backup_path(Path("/h/.claude.bak"), exists=taken.__contains__) == Path(
            "/h/.claude.bak.2"
        )


# ── ~/.ssh/config parsing ────────────────────────────────────────────────


class TestHostEntry:
    def test_missing_config(self):
        assert has_host_entry(None, "github.com") is False

    def test_present(self):
        assert has_host_entry(CONFIG_WITH_GITHUB, "github.com") is True

    def test_other_host_only(self):
        assert has_host_entry("Host example.org\n    User me\n", "github.com") is False

    def test_host_among_several_patterns(self):
        assert has_host_entry("Host gitlab.com github.com\n", "github.com") is True

    def test_similar_host_name_does_not_match(self):
        assert has_host_entry("Host github.com-work\n", "github.com") is False

    def test_hostname_directive_is_not_a_marker(self):
        assert has_host_entry("Host gh\n    HostName github.com\n", "github.com") is False

    def test_identity_files_scoped_to_block(self):
        assert host_identity_files(CONFIG_WITH_GITHUB, "github.com") == [
            "/home/agent/.ssh/id_ed25519_lucos_agent"
        ]
        assert host_identity_files(CONFIG_WITH_GITHUB, "example.org") == []

    def test_entry_uses_identity(self):
        home = Path("/home/agent")
        assert entry_uses_identity(CONFIG_WITH_GITHUB, "github.com", KEY, home) is True
        assert (
            entry_uses_identity(CONFIG_WITH_GITHUB, "github.com", Path("/other/key"), home)
            is False
        )

    def test_tilde_expands_against_given_home(self):
        config = "Host github.com\n    IdentityFile ~/.ssh/id_ed25519_lucos_agent\n"
        home = Path("/home/agent")
        assert entry_uses_identity(config, "github.com", KEY, home) is True
        assert (
            entry_uses_identity(config, "github.com", KEY, Path("/home/someone-else"))
            is False
        )


# ── plan_identity ────────────────────────────────────────────────────────


class TestPlanIdentity:
    identity = SSHIdentity(key_path=KEY, comment="lucos-agent-coding-sandbox")

    def test_generates_when_missing(self):
        actions = plan_identity(self.identity, key_exists=False, public_key_exists=False)
        assert [a.kind for a in actions] == [ActionKind.GENERATE_KEYPAIR]

    def test_never_regenerates_existing_key(self):
        actions = plan_identity(self.identity, key_exists=True, public_key_exists=True)
        assert [a.kind for a in actions] == [ActionKind.SKIP]
        assert not actions[0].is_change

    def test_derives_missing_public_key(self):
        actions = plan_identity(self.identity, key_exists=True, public_key_exists=False)
        assert [a.kind for a in actions] == [ActionKind.DERIVE_PUBLIC_KEY]
        assert actions[0].target == KEY.with_name(KEY.name + ".pub")

    def test_stray_public_key_still_generates(self):
        actions = plan_identity(self.identity, key_exists=False, public_key_exists=True)
        assert [a.kind for a in actions] == [ActionKind.GENERATE_KEYPAIR]


# ── plan_trust_entry ─────────────────────────────────────────────────────


class TestPlanTrustEntry:
    entry = TrustEntry(host="github.com", user="git", identity_file=str(KEY))
    config_path = Path("/home/agent/.ssh/config")

    def test_appends_when_absent(self):
        actions = plan_trust_entry("Host example.org\n", self.config_path, self.entry)
        assert [a.kind for a in actions] == [ActionKind.APPEND_TRUST_ENTRY]
        assert "Host github.com\n" in actions[0].source

    def test_appends_when_file_missing(self):
        actions = plan_trust_entry(None, self.config_path, self.entry)
        assert actions[0].kind == ActionKind.APPEND_TRUST_ENTRY

    def test_skips_when_present(self):
        actions = plan_trust_entry(CONFIG_WITH_GITHUB, self.config_path, self.entry)
        assert [a.kind for a in actions] == [ActionKind.SKIP]

    def test_rendered_block(self):
        assert self.entry.render() == (
            "\nHost github.com\n"
            "    HostName github.com\n"
            "    User git\n"
            f"    IdentityFile {KEY}\n"
            "    IdentitiesOnly yes\n"
        )


# ── plan_singleton ───────────────────────────────────────────────────────


class TestPlanSingleton:
    path = Path("/home/agent/.claude")
    url = "git@github.com:lucas42/lucos_claude_config.git"
    backup = Path("/home/agent/.claude.bak")

    def kinds(self, state):
        return [a.kind for a in plan_singleton(state, self.path, self.url, self.backup)]

    def test_repository_is_pulled(self):
        assert self.kinds(CheckoutState.REPOSITORY) == [ActionKind.PULL]

    def test_occupied_is_moved_aside_then_cloned(self):
        actions = plan_singleton(CheckoutState.OCCUPIED, self.path, self.url, self.backup)
        assert [a.kind for a in actions] == [ActionKind.MOVE_ASIDE, ActionKind.CLONE]
        assert actions[0].destination == self.backup
        assert actions[1].source == self.url

    @pytest.mark.parametrize("state", [CheckoutState.ABSENT, CheckoutState.EMPTY])
    def test_absent_or_empty_is_cloned(self, state):
        assert self.kinds(state) == [ActionKind.CLONE]


# ── plan_fleet ───────────────────────────────────────────────────────────


class TestPlanFleet:
    def test_empty_listing(self):
        assert plan_fleet([], BASE, "lucos_claude_config", lambda p: False) == []

    def test_clone_or_pull_by_git_dir(self):
        existing = {BASE / "lucos_photos"}
        actions = plan_fleet(
            entries("lucos_photos", "lucos_time"),
            BASE,
            "lucos_claude_config",
            existing.__contains__,
        )
        assert [(a.kind, a.resource) for a in actions] == [
            (ActionKind.PULL, "lucos_photos"),
            (ActionKind.CLONE, "lucos_time"),
        ]
        assert actions[1].target == BASE / "lucos_time"
        assert actions[1].source == "git@github.com:lucas42/lucos_time.git"

    def test_archived_repositories_produce_no_action(self):
        actions = plan_fleet(
            entries("a", "old", "b", archived={"old"}),
            BASE,
            "lucos_claude_config",
            lambda p: False,
        )
        assert [a.resource for a in actions] == ["a", "b"]

    def test_singleton_is_skipped_by_name(self):
        actions = plan_fleet(
            entries("a", "lucos_claude_config"),
            BASE,
            "lucos_claude_config",
            lambda p: False,
        )
        assert [(a.kind, a.resource) for a in actions] == [
            (ActionKind.CLONE, "a"),
            (ActionKind.SKIP, "lucos_claude_config"),
        ]

    def test_unusable_names_are_skipped(self):
        actions = plan_fleet(entries(".."), BASE, "cfg", lambda p: False)
        assert [a.kind for a in actions] == [ActionKind.SKIP]

    def test_listing_order_is_kept(self):
        names = ["c", "a", "b"]
        actions = plan_fleet(entries(*names), BASE, "cfg", lambda p: False)
        assert [a.resource for a in actions] == names
