"""Application configuration.

Every deployment-specific value (database, admin secret, listen address,
upload/public directories) is read once from the environment into a frozen
``Settings`` instance. Components receive it explicitly: ``create_app``
stores it on the application state and the API dependencies hand it to the
services, so tests can build apps with their own settings.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///./posthub.db"
DEFAULT_PORT = 3000
DEFAULT_MAX_UPLOAD_FILES = 10

_TRUTHY = ("true", "1", "yes", "on")


def _env_flag(name: str, default: bool = False) -> bool:
	raw = os.getenv(name)
	if raw is None or not raw.strip():
		return default
	return raw.strip().lower() in _TRUTHY


def normalize_database_url(url: str) -> str:
	"""Rewrite hosting-provider ``postgres://`` URLs to the SQLAlchemy dialect name."""
	if url.startswith("postgres://"):
		return "postgresql+psycopg2://" + url[len("postgres://"):]
	if url.startswith("postgresql://"):
		return "postgresql+psycopg2://" + url[len("postgresql://"):]
	return url


@dataclass(frozen=True)
class Settings:
	database_url: str = DEFAULT_DATABASE_URL
	database_ssl: bool = False
	admin_password: str | None = None
	host: str = "0.0.0.0"
	port: int = DEFAULT_PORT
	uploads_dir: Path = Path("uploads")
	public_dir: Path = Path("public")
	max_upload_files: int = DEFAULT_MAX_UPLOAD_FILES
	cleanup_orphan_uploads: bool = False
	cors_origin_regex: str = ".*"
	log_level: str = "INFO"
	log_file: str | None = None

	@classmethod
	def from_env(cls) -> "Settings":
		"""Build settings from process environment (after loading ``.env``)."""
		load_dotenv()
		return cls(
			database_url=normalize_database_url(os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL),
			database_ssl=_env_flag("DATABASE_SSL"),
			admin_password=os.getenv("ADMIN_PASSWORD") or None,
			host=os.getenv("HOST", "0.0.0.0"),
			port=int(os.getenv("PORT") or DEFAULT_PORT),
			uploads_dir=Path(os.getenv("UPLOADS_DIR") or "uploads"),
			public_dir=Path(os.getenv("PUBLIC_DIR") or "public"),
			max_upload_files=int(os.getenv("MAX_UPLOAD_FILES") or DEFAULT_MAX_UPLOAD_FILES),
			cleanup_orphan_uploads=_env_flag("CLEANUP_ORPHAN_UPLOADS"),
			cors_origin_regex=os.getenv("CORS_ORIGIN_REGEX", ".*"),
			log_level=os.getenv("LOG_LEVEL", "INFO"),
			log_file=os.getenv("LOG_FILE") or None,
		)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
	return Settings.from_env()


__all__ = ["Settings", "get_settings", "normalize_database_url"]
