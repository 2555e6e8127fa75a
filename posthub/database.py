from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from posthub.config import Settings


def build_engine(settings: Settings) -> Engine:
	"""Create the engine for ``settings.database_url``.

	SQLite needs ``check_same_thread`` off because requests are served from
	worker threads; an in-memory SQLite database has to share one connection
	(StaticPool) or every session would see an empty database. Hosted
	Postgres usually requires SSL (``DATABASE_SSL``).
	"""
	url = make_url(settings.database_url)
	kwargs: dict[str, object] = {"pool_pre_ping": True}
	if url.get_backend_name() == "sqlite":
		kwargs["connect_args"] = {"check_same_thread": False}
		if url.database in (None, "", ":memory:"):
			kwargs["poolclass"] = StaticPool
	elif settings.database_ssl:
		kwargs["connect_args"] = {"sslmode": "require"}
	return create_engine(url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
	return sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
	pass


def init_db(engine: Engine) -> None:
	"""Create tables that do not exist yet."""
	# model modules must be imported so their tables are registered on Base
	from posthub.models import db as _models  # noqa: F401
	Base.metadata.create_all(bind=engine)
