"""Git identity and SSH setup."""

from __future__ import annotations

from pathlib import Path

import pytest

from macos_bootstrap.errors import ValidationError
from macos_bootstrap.lib import identity
from macos_bootstrap.lib.identity import GitIdentity

from .helpers import FakeRunner, fail, ok


@pytest.mark.parametrize(("name", "email"), [("", "a@b.c"), ("Ada", ""), ("   ", "a@b.c"), (None, None)])
def test_empty_identity_is_fatal(name, email) -> None:
    with pytest.raises(ValidationError) as excinfo:
        identity.validate_identity(name, email)
    assert excinfo.value.exit_code == 4


def test_resolve_prompts_only_for_missing_values() -> None:
    asked = []

    def prompt(message: str) -> str:
        asked.append(message)
        return "ada@example.com"

    ident = identity.resolve_identity("Ada Lovelace", None, prompt)

    assert ident == GitIdentity("Ada Lovelace", "ada@example.com")
    assert len(asked) == 1
    assert "email" in asked[0]


def test_configure_git_tolerates_optional_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    runner = FakeRunner(lambda argv: fail(argv) if "credential.helper" in argv else ok(argv))
    monkeypatch.setattr(identity, "run_cmd", runner)

    identity.configure_git(GitIdentity("Ada", "ada@example.com"), editor="vim", brew_prefix="/opt/homebrew")

    assert ["git", "config", "--global", "user.name", "Ada"] in runner.calls
    assert ["git", "config", "--global", "core.editor", "vim"] in runner.calls
    assert ["git", "config", "--global", "gpg.program", "/opt/homebrew/bin/gpg"] in runner.calls


def test_existing_ssh_key_is_kept(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    key = tmp_path / "id_ed25519"
    key.write_text("secret", encoding="utf-8")
    runner = FakeRunner()
    monkeypatch.setattr(identity, "run_cmd", runner)

    assert identity.ensure_ssh_key(str(key), "ada@example.com") is False
    assert runner.calls == []


def test_new_ssh_key_is_generated_and_copied(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    key = tmp_path / ".ssh" / "id_ed25519"

    def responder(argv):
        if argv[0] == "ssh-keygen":
            key.with_name("id_ed25519.pub").write_text("ssh-ed25519 AAAA ada@example.com\n", encoding="utf-8")
        if argv[:2] == ["ssh-add", "--apple-use-keychain"]:
            return fail(argv)
        return ok(argv)

    runner = FakeRunner(responder)
    monkeypatch.setattr(identity, "run_cmd", runner)

    assert identity.ensure_ssh_key(str(key), "ada@example.com") is True
    assert runner.calls[0][:3] == ["ssh-keygen", "-t", "ed25519"]
    assert ["ssh-add", str(key)] in runner.calls
    assert runner.calls[-1] == ["pbcopy"]
    assert oct(key.parent.stat().st_mode & 0o777) == oct(0o700)


def test_ssh_config_block_added_once(tmp_path: Path) -> None:
    cfg = tmp_path / "config"
    cfg.write_text("Host example\n  User me", encoding="utf-8")

    assert identity.ensure_ssh_config(str(cfg), "~/.ssh/id_ed25519") is True
    assert identity.ensure_ssh_config(str(cfg), "~/.ssh/id_ed25519") is False

    text = cfg.read_text(encoding="utf-8")
    assert text.count("Host github.com") == 1
    assert "IdentityFile ~/.ssh/id_ed25519" in text
    assert oct(cfg.stat().st_mode & 0o777) == oct(0o600)
