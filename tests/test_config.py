from pathlib import Path

from posthub.config import Settings, normalize_database_url


def test_defaults_without_environment(monkeypatch):
    for name in ("DATABASE_URL", "ADMIN_PASSWORD", "PORT", "UPLOADS_DIR", "PUBLIC_DIR",
                 "CLEANUP_ORPHAN_UPLOADS", "DATABASE_SSL", "MAX_UPLOAD_FILES"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("posthub.config.load_dotenv", lambda: False)
    settings = Settings.from_env()
    assert settings.port == 3000
    assert settings.admin_password is None
    assert settings.uploads_dir == Path("uploads")
    assert settings.max_upload_files == 10
    assert settings.cleanup_orphan_uploads is False
    assert settings.database_url.startswith("sqlite")


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setattr("posthub.config.load_dotenv", lambda: False)
    monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db.example:5432/hub")
    monkeypatch.setenv("ADMIN_PASSWORD", "pw")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path / "disk"))
    monkeypatch.setenv("CLEANUP_ORPHAN_UPLOADS", "yes")
    monkeypatch.setenv("DATABASE_SSL", "true")
    settings = Settings.from_env()
    assert settings.database_url == "postgresql+psycopg2://u:p@db.example:5432/hub"
    assert settings.admin_password == "pw"
    assert settings.port == 8080
    assert settings.uploads_dir == tmp_path / "disk"
    assert settings.cleanup_orphan_uploads is True
    assert settings.database_ssl is True


def test_empty_admin_password_counts_as_unset(monkeypatch):
    monkeypatch.setattr("posthub.config.load_dotenv", lambda: False)
    monkeypatch.setenv("ADMIN_PASSWORD", "")
    assert Settings.from_env().admin_password is None


def test_normalize_database_url_leaves_other_schemes():
    assert normalize_database_url("sqlite:///x.db") == "sqlite:///x.db"
    assert normalize_database_url("postgresql+psycopg2://h/db") == "postgresql+psycopg2://h/db"
    assert normalize_database_url("postgresql://h/db") == "postgresql+psycopg2://h/db"
