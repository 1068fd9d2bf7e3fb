"""
Test the administrative command line.
"""
import asyncio

import pytest

from event_manager_api.app.core.config import settings as default_settings
from event_manager_api.app.core.db import Database
from event_manager_api.app.core.security import decode_access_token, verify_password
from event_manager_api.app.schemas.user import UserCreate
from event_manager_api.app.services.user_service import UserService
from event_manager_api.cli import main


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "cli.db")


@pytest.fixture
def existing_user(db_path) -> str:
    database = Database(db_path)
    database.init_db()
    with database.connection() as conn:
        asyncio.run(
            UserService.create_user(
                conn, UserCreate(email="admin@example.com", name="Admin", password="old-pass-123")
            )
        )
    return "admin@example.com"


def stored_hash(db_path: str, email: str) -> str:
    with Database(db_path).connection() as conn:
        return conn.execute("SELECT password_hash FROM users WHERE email = ?", (email,)).fetchone()[0]


def test_init_db_creates_schema(db_path, capsys):
    assert main(["--db", db_path, "init-db"]) == 0
    assert "Database ready" in capsys.readouterr().out

    with Database(db_path).connection() as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
        version = conn.execute("SELECT MAX(version) FROM migrations").fetchone()[0]
    assert {"users", "events", "registrations", "migrations"} <= tables
    assert version == 2

    # Running it again is a no-op.
    assert main(["--db", db_path, "init-db"]) == 0


def test_reset_password(db_path, existing_user, capsys):
    assert main(["--db", db_path, "reset-password", "--email", existing_user, "--password", "fresh-pass"]) == 0
    assert "Password updated" in capsys.readouterr().out
    password_hash = stored_hash(db_path, existing_user)
    assert verify_password("fresh-pass", password_hash)
    assert not verify_password("old-pass-123", password_hash)


def test_reset_password_prompts(db_path, existing_user, monkeypatch):
    monkeypatch.setattr("event_manager_api.cli.getpass.getpass", lambda prompt: "prompted-pass")
    assert main(["--db", db_path, "reset-password", "--email", existing_user]) == 0
    assert verify_password("prompted-pass", stored_hash(db_path, existing_user))


def test_reset_password_too_short(db_path, existing_user, capsys):
    assert main(["--db", db_path, "reset-password", "--email", existing_user, "--password", "123"]) == 1
    assert "at least 6 characters" in capsys.readouterr().err
    assert verify_password("old-pass-123", stored_hash(db_path, existing_user))


def test_reset_password_unknown_user(db_path, existing_user, capsys):
    code = main(["--db", db_path, "reset-password", "--email", "ghost@example.com", "--password", "whatever"])
    assert code == 2
    assert "No user found" in capsys.readouterr().err


def test_create_token(db_path, existing_user, capsys):
    assert main(["--db", db_path, "create-token", "--email", existing_user, "--minutes", "5"]) == 0
    token = capsys.readouterr().out.strip()
    claims = decode_access_token(token, default_settings)
    assert claims["email"] == existing_user
    assert claims["exp"] - claims["iat"] == 5 * 60


def test_create_token_unknown_user(db_path, existing_user):
    assert main(["--db", db_path, "create-token", "--email", "ghost@example.com"]) == 2


def test_create_token_rejects_non_positive_minutes(db_path, existing_user):
    assert main(["--db", db_path, "create-token", "--email", existing_user, "--minutes", "0"]) == 1


def test_command_is_required():
    with pytest.raises(SystemExit):
        main([])
