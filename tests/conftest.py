import time

import pytest
from fastapi.testclient import TestClient

from todolist.core.config import Settings
from todolist.core.security import TokenIssuer
from todolist.db import session as db_session
from todolist.db.base import Base
from todolist.db.models import User
from todolist.main import create_app
from todolist.services.chat_linker import sign_fields

JWT_SECRET = "test-secret"
BOT_TOKEN = "123456:TEST-BOT-TOKEN"


@pytest.fixture
def settings(tmp_path):
	return Settings(
		DATABASE_URL=f"sqlite:///{tmp_path / 'todolist.db'}",
		JWT_SECRET=JWT_SECRET,
		TELEGRAM_TOKEN=BOT_TOKEN,
		TELEGRAM_BOT_USERNAME="todo_test_bot",
		DB_POOL_SIZE=5,
		DB_POOL_TIMEOUT_SEC=5,
	)


@pytest.fixture
def engine(settings):
	engine = db_session.init_engine(settings)
	Base.metadata.create_all(bind=engine)
	yield engine
	engine.dispose()


@pytest.fixture
def db(engine):
	session = db_session.SessionLocal()
	yield session
	session.close()


@pytest.fixture
def tokens():
	return TokenIssuer(JWT_SECRET)


@pytest.fixture
def make_user(db):
	"""Insert a user row directly; password hashing is covered elsewhere."""

	def _make(email="alice@example.com", telegram_id=None):
		user = User(email=email, telegram_id=telegram_id)
		db.add(user)
		db.commit()
		db.refresh(user)
		return user

	return _make


@pytest.fixture
def client(settings):
	app = create_app(settings)
	with TestClient(app) as test_client:
		yield test_client
	db_session.engine.dispose()


def widget_payload(chat_user_id=777, auth_date=None, bot_token=BOT_TOKEN, **extra):
	"""Build login-widget data signed the way Telegram signs it."""
	data = {
		"id": chat_user_id,
		"first_name": "Alice",
		"username": "alice_tg",
		"auth_date": int(time.time()) if auth_date is None else auth_date,
		**extra,
	}
	data["hash"] = sign_fields(data, bot_token)
	return data
