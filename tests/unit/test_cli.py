"""Tests for the securevote CLI."""

import pytest
from typer.testing import CliRunner

from securevote.cli import app


runner = CliRunner()


@pytest.fixture
def file_db(tmp_path, monkeypatch):
    monkeypatch.setenv("SECUREVOTE_DB_URL", f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("SECUREVOTE_JWT_SECRET", "test-jwt-secret")
    monkeypatch.setenv("SECUREVOTE_ENVIRONMENT", "development")
    monkeypatch.delenv("SECUREVOTE_ADMIN_EMAIL", raising=False)
    monkeypatch.delenv("SECUREVOTE_ADMIN_PASSWORD", raising=False)

    from securevote.common.config import get_settings
    from securevote.deps import reset_singletons
    get_settings.cache_clear()
    reset_singletons()
    yield
    get_settings.cache_clear()
    reset_singletons()


class TestMigrateCommand:
    def test_applies_then_up_to_date(self, file_db):
        result = runner.invoke(app, ["migrate"])
        assert result.exit_code == 0
        assert "initial_schema" in result.output

        result = runner.invoke(app, ["migrate"])
        assert result.exit_code == 0
        assert "Schema up to date" in result.output

    def test_bootstrap_admin(self, file_db, monkeypatch):
        monkeypatch.setenv("SECUREVOTE_ADMIN_EMAIL", "root@example.com")
        monkeypatch.setenv("SECUREVOTE_ADMIN_PASSWORD", "Adm1n!pass")
        from securevote.common.config import get_settings
        get_settings.cache_clear()

        result = runner.invoke(app, ["migrate"])
        assert result.exit_code == 0
        assert "root@example.com" in result.output


class TestCreateAdminCommand:
    def test_create_then_exists(self, file_db):
        args = ["create-admin", "root@example.com", "--password", "Adm1n!pass"]
        result = runner.invoke(app, args)
        assert result.exit_code == 0
        assert "Created admin" in result.output

        result = runner.invoke(app, args)
        assert result.exit_code == 0
        assert "already exists" in result.output

    def test_weak_password(self, file_db):
        result = runner.invoke(app, ["create-admin", "root@example.com", "--password", "weak"])
        assert result.exit_code == 1
        assert "INVALID_INPUT" in result.output
