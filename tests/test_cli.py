"""Tests for the create-user command in main.py.

getpass and get_settings are monkeypatched so the command runs against a
temporary database without a terminal.
"""

import pytest

import main
from auth.store import UserStore
from core.config import Settings


@pytest.fixture
def cli_settings(tmp_path, monkeypatch):
    settings = Settings(debug=True, database_url=f"sqlite:///{tmp_path / 'cli.db'}", bcrypt_rounds=4)
    monkeypatch.setattr(main, "get_settings", lambda: settings)
    return settings


def _answers(monkeypatch, *values):
    it = iter(values)
    monkeypatch.setattr(main.getpass, "getpass", lambda prompt="": next(it))


def test_create_user(cli_settings, monkeypatch, capsys):
    _answers(monkeypatch, "longpass1", "longpass1")
    assert main.main(["create-user", "rita", "r@x.com"]) == 0
    assert "Created rita" in capsys.readouterr().out

    store = UserStore(cli_settings.database_url)
    try:
        assert store.get_by_username("rita").email == "r@x.com"
        assert store.find_identity("rita") is not None
    finally:
        store.close()


def test_create_user_password_mismatch(cli_settings, monkeypatch, capsys):
    _answers(monkeypatch, "longpass1", "longpass2")
    assert main.main(["create-user", "rita", "r@x.com"]) == 1
    assert "do not match" in capsys.readouterr().out


def test_create_user_validation_error(cli_settings, monkeypatch, capsys):
    _answers(monkeypatch, "short", "short")
    assert main.main(["create-user", "rita", "r@x.com"]) == 1
    assert "at least 8" in capsys.readouterr().out
