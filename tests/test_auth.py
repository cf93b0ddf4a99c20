from types import SimpleNamespace

import keyring
import pytest

import ghbr.auth as auth
import ghbr.gitconfig as gitconfig
from ghbr.errors import CLIError, ValidationError
from ghbr.prompts import InteractionAborted


def test_persist_and_load_token_round_trip(capsys):
    auth.persist_token("  ghp_abcdefghijklmnopqrstuvwxyz  ")
    assert auth.load_keyring_token() == "ghp_abcdefghijklmnopqrstuvwxyz"
    out = capsys.readouterr().out
    assert "ghp_...wxyz" in out
    assert "ghp_abcdefghijklmnopqrstuvwxyz" not in out


def test_persist_empty_token_is_rejected():
    with pytest.raises(ValidationError):
        auth.persist_token("   ")


def test_persist_token_reports_keyring_failure(monkeypatch):
    def broken(*args):
        raise RuntimeError("locked")

    monkeypatch.setattr(auth.keyring, "set_password", broken)
    with pytest.raises(CLIError) as excinfo:
        auth.persist_token("ghp_token")
    assert "locked" in str(excinfo.value)


def test_clear_token():
    assert auth.clear_token() is False
    keyring.set_password("ghbr", "github_token", "stored")
    assert auth.clear_token() is True
    assert auth.load_keyring_token() is None


def test_resolve_token_precedence(monkeypatch):
    monkeypatch.setattr(
        gitconfig, "git_config_value", lambda key: "from-git" if key == "github.token" else None
    )
    assert auth.resolve_token() == auth.TokenSource("from-git", "git config")

    keyring.set_password("ghbr", "github_token", "from-keyring")
    assert auth.resolve_token() == auth.TokenSource("from-keyring", "system keyring")

    monkeypatch.setenv("GITHUB_TOKEN", "from-env")
    assert auth.resolve_token() == auth.TokenSource("from-env", "environment variable")

    assert auth.resolve_token(" from-flag ") == auth.TokenSource("from-flag", "flag")


def test_resolve_token_none_when_unconfigured():
    assert auth.resolve_token() is None
    assert auth.resolve_token("   ") is None


def test_read_login_token_prefers_argument(monkeypatch):
    monkeypatch.setattr(auth, "prompt_token", lambda *a, **k: pytest.fail("prompted"))
    assert auth.read_login_token(SimpleNamespace(token=" ghp_given ")) == "ghp_given"


def test_read_login_token_prompts_when_nothing_stored(monkeypatch):
    monkeypatch.setattr(auth, "prompt_token", lambda *a, **k: "ghp_typed")
    assert auth.read_login_token(SimpleNamespace(token=None)) == "ghp_typed"


def test_read_login_token_keeps_existing_when_declined(monkeypatch):
    keyring.set_password("ghbr", "github_token", "ghp_existing")
    monkeypatch.setattr(auth, "prompt_confirm", lambda *a, **k: False)
    monkeypatch.setattr(auth, "prompt_token", lambda *a, **k: pytest.fail("prompted"))
    assert auth.read_login_token(SimpleNamespace(token=None)) == "ghp_existing"


def test_read_login_token_propagates_abort(monkeypatch):
    def aborted(*args, **kwargs):
        raise InteractionAborted()

    monkeypatch.setattr(auth, "prompt_token", aborted)
    with pytest.raises(InteractionAborted):
        auth.read_login_token(SimpleNamespace(token=None))


def test_handle_auth_login_and_logout(capsys):
    assert auth.handle_auth_login(SimpleNamespace(token="ghp_stored_token")) == 0
    assert auth.load_keyring_token() == "ghp_stored_token"
    assert auth.handle_auth_logout(SimpleNamespace()) == 0
    assert auth.handle_auth_logout(SimpleNamespace()) == 0
    out = capsys.readouterr().out
    assert "removed stored GitHub token" in out
    assert "no stored GitHub token to remove" in out


def test_handle_auth_status(monkeypatch, capsys):
    auth.handle_auth_status(SimpleNamespace())
    assert "no GitHub token configured" in capsys.readouterr().out

    monkeypatch.setenv("GITHUB_TOKEN", "ghp_1234567890abcdef")
    auth.handle_auth_status(SimpleNamespace())
    out = capsys.readouterr().out
    assert "environment variable" in out
    assert "ghp_...cdef" in out
