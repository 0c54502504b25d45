from contextlib import contextmanager
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool

from todolist.core.errors import ServiceUnavailable
from todolist.core.logging import log_event

engine: Optional[Engine] = None

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)

def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
	cursor = dbapi_connection.cursor()
	cursor.execute("PRAGMA foreign_keys=ON")
	cursor.close()

def build_engine(settings) -> Engine:
	url = settings.DATABASE_URL
	is_sqlite = url.startswith("sqlite")
	if is_sqlite:
		connect_args = {"check_same_thread": False, "timeout": settings.DB_STATEMENT_TIMEOUT_SEC}
	elif url.startswith("mysql"):
		connect_args = {
			"connect_timeout": settings.DB_STATEMENT_TIMEOUT_SEC,
			"read_timeout": settings.DB_STATEMENT_TIMEOUT_SEC,
			"write_timeout": settings.DB_STATEMENT_TIMEOUT_SEC,
		}
	else:
		connect_args = {}

	new_engine = create_engine(
		url,
		connect_args=connect_args,
		poolclass=QueuePool,
		pool_size=settings.DB_POOL_SIZE,
		max_overflow=0,
		pool_timeout=settings.DB_POOL_TIMEOUT_SEC,
		pool_pre_ping=not is_sqlite,
	)
	if is_sqlite:
		event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)
	return new_engine

def init_engine(settings) -> Engine:
	global engine
	if engine is not None:
		engine.dispose()
	engine = build_engine(settings)
	SessionLocal.configure(bind=engine)
	return engine

def get_db():
	db = SessionLocal()
	try:
		yield db
	finally:
		db.close()

@contextmanager
def store_call(db: Session, operation: str):
	"""Turn any store failure into ServiceUnavailable, logging the cause."""
	try:
		yield
	except SQLAlchemyError as exc:
		db.rollback()
		log_event("store_error", operation=operation, error=str(exc))
		raise ServiceUnavailable() from exc
