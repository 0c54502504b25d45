"""HTTP flows through the FastAPI app with a temporary SQLite store."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from tests.conftest import JWT_SECRET, widget_payload
from todolist.core.errors import ServiceUnavailable
from todolist.core.security import TokenIssuer
from todolist.services.item_service import ItemService

PASSWORD = "secret123"


def register(client, email="alice@example.com", **extra):
	body = {"email": email, "password": PASSWORD, "firstName": "Alice", "lastName": "Smith", **extra}
	return client.post("/register", json=body)


def auth(token):
	return {"Authorization": f"Bearer {token}"}


def texts(body):
	return [item["text"] for item in body["items"]]


class TestPages:
	def test_health(self, client):
		assert client.get("/health").json() == {"status": "OK"}

	def test_index_page(self, client):
		res = client.get("/")
		assert res.status_code == 200
		assert 'id="rows"' in res.text

	def test_telegram_login_page_has_bot_username(self, client):
		res = client.get("/telegram-login")
		assert res.status_code == 200
		assert 'data-telegram-login="todo_test_bot"' in res.text

	def test_request_id_header(self, client):
		assert client.get("/health").headers["X-Request-Id"]


class TestRegisterAndLogin:
	def test_register_returns_token_and_user(self, client):
		res = register(client)
		assert res.status_code == 200
		body = res.json()
		assert body["success"] is True
		assert body["token"]
		assert body["user"]["email"] == "alice@example.com"
		assert body["user"]["firstName"] == "Alice"
		assert body["user"]["lastName"] == "Smith"
		assert body["user"]["telegramLinked"] is False

	def test_register_lowercases_email(self, client):
		assert register(client, email="Alice@Example.com").json()["user"]["email"] == "alice@example.com"

	def test_duplicate_email(self, client):
		register(client)
		res = register(client, email="ALICE@example.com")
		assert res.status_code == 400
		assert res.json()["success"] is False
		assert res.json()["error"] == "Email already registered"

	def test_weak_password_rejected(self, client):
		res = client.post("/register", json={"email": "alice@example.com", "password": "short"})
		assert res.status_code == 400
		assert res.json()["success"] is False

	def test_login(self, client):
		register(client)
		res = client.post("/login", json={"email": "alice@example.com", "password": PASSWORD})
		assert res.status_code == 200
		assert res.json()["user"]["email"] == "alice@example.com"

	def test_login_wrong_password(self, client):
		register(client)
		res = client.post("/login", json={"email": "alice@example.com", "password": "wrong-pass1"})
		assert res.status_code == 401
		assert res.json()["error"] == "Invalid email or password"

	def test_login_unknown_email(self, client):
		res = client.post("/login", json={"email": "nobody@example.com", "password": PASSWORD})
		assert res.status_code == 401
		assert res.json()["error"] == "Invalid email or password"


class TestAuthCheck:
	def test_without_token(self, client):
		res = client.get("/auth/check")
		assert res.status_code == 401
		assert res.json() == {"authenticated": False}

	def test_with_bad_token(self, client):
		res = client.get("/auth/check", headers=auth("garbage"))
		assert res.status_code == 401
		assert res.json() == {"authenticated": False}

	def test_with_token(self, client):
		token = register(client).json()["token"]
		res = client.get("/auth/check", headers=auth(token))
		assert res.status_code == 200
		assert res.json()["authenticated"] is True
		assert res.json()["user"]["email"] == "alice@example.com"


class TestItems:
	def test_requires_token(self, client):
		for method, path in [("get", "/list"), ("post", "/add"), ("put", "/edit/1"), ("delete", "/delete/1")]:
			res = client.request(method.upper(), path, json={"text": "x"})
			assert res.status_code == 401, path
			assert res.json()["success"] is False

	def test_expired_token(self, client):
		user_id = register(client).json()["user"]["id"]
		past = datetime.now(timezone.utc) - timedelta(hours=2)
		token = TokenIssuer(JWT_SECRET).issue(SimpleNamespace(id=user_id, email="alice@example.com"), issued_at=past)
		assert client.get("/list", headers=auth(token)).status_code == 401

	def test_end_to_end_two_users(self, client):
		token_a = register(client, email="alice@example.com").json()["token"]
		token_b = register(client, email="bob@example.com").json()["token"]

		assert client.get("/list", headers=auth(token_b)).json()["items"] == []

		res = client.post("/add", json={"text": "buy milk"}, headers=auth(token_a))
		assert res.status_code == 200
		assert texts(res.json()) == ["buy milk"]
		item_id = res.json()["items"][0]["id"]

		assert texts(client.get("/list", headers=auth(token_a)).json()) == ["buy milk"]
		assert client.get("/list", headers=auth(token_b)).json()["items"] == []

		res = client.delete(f"/delete/{item_id}", headers=auth(token_a))
		assert res.status_code == 200
		assert res.json()["items"] == []
		assert client.get("/list", headers=auth(token_a)).json()["items"] == []
		assert client.get("/list", headers=auth(token_b)).json()["items"] == []

	def test_edit(self, client):
		token = register(client).json()["token"]
		item_id = client.post("/add", json={"text": "old"}, headers=auth(token)).json()["items"][0]["id"]

		res = client.put(f"/edit/{item_id}", json={"text": "new"}, headers=auth(token))

		assert res.status_code == 200
		assert texts(res.json()) == ["new"]

	def test_foreign_item_edit_and_delete_are_not_found(self, client):
		token_a = register(client, email="alice@example.com").json()["token"]
		token_b = register(client, email="bob@example.com").json()["token"]
		item_id = client.post("/add", json={"text": "mine"}, headers=auth(token_a)).json()["items"][0]["id"]

		res = client.put(f"/edit/{item_id}", json={"text": "stolen"}, headers=auth(token_b))
		assert res.status_code == 404
		assert res.json()["success"] is False
		assert client.delete(f"/delete/{item_id}", headers=auth(token_b)).status_code == 404

		assert texts(client.get("/list", headers=auth(token_a)).json()) == ["mine"]

	def test_empty_text_rejected(self, client):
		token = register(client).json()["token"]
		res = client.post("/add", json={"text": "  "}, headers=auth(token))
		assert res.status_code == 400
		assert res.json()["error"] == "Task text must not be empty"

	def test_non_string_text_rejected(self, client):
		token = register(client).json()["token"]
		assert client.post("/add", json={"text": 12}, headers=auth(token)).status_code == 400
		assert client.post("/add", json={}, headers=auth(token)).status_code == 400

	def test_bad_item_id(self, client):
		token = register(client).json()["token"]
		assert client.delete("/delete/abc", headers=auth(token)).status_code == 400

	@pytest.mark.parametrize("item_id", ["0", "-5", "2147483648", "99999999999999999999"])
	def test_out_of_range_item_id_is_rejected(self, client, item_id):
		token = register(client).json()["token"]

		res = client.delete(f"/delete/{item_id}", headers=auth(token))
		assert res.status_code == 400
		assert res.json()["success"] is False

		res = client.put(f"/edit/{item_id}", json={"text": "x"}, headers=auth(token))
		assert res.status_code == 400
		assert res.json()["success"] is False

	def test_unexpected_error_is_structured(self, client, monkeypatch):
		token = register(client).json()["token"]

		def broken_list(self, owner_id):
			raise OverflowError("Python int too large to convert to SQLite INTEGER")

		monkeypatch.setattr(ItemService, "list", broken_list)
		quiet_client = TestClient(client.app, raise_server_exceptions=False)

		res = quiet_client.get("/list", headers=auth(token))

		assert res.status_code == 500
		assert res.headers["content-type"].startswith("application/json")
		assert res.json()["success"] is False
		assert res.json()["error"] == ServiceUnavailable.default_message
		assert "SQLite" not in res.text

	def test_rows_are_escaped_and_numbered(self, client):
		token = register(client).json()["token"]
		client.post("/add", json={"text": "first"}, headers=auth(token))
		rows = client.post("/add", json={"text": "<b>bold</b>"}, headers=auth(token)).json()["rows"]
		assert "<td>1</td>" in rows and "<td>2</td>" in rows
		assert "&lt;b&gt;bold&lt;/b&gt;" in rows
		assert "<b>bold</b>" not in rows


class TestTelegramCallback:
	def test_link_account(self, client):
		token = register(client).json()["token"]
		res = client.post("/telegram-callback", json={"user": widget_payload(), "token": token})
		assert res.status_code == 200
		assert res.json() == {"success": True, "telegramLinked": True}

		check = client.get("/auth/check", headers=auth(token)).json()
		assert check["user"]["telegramLinked"] is True

	def test_forged_widget_data(self, client):
		token = register(client).json()["token"]
		payload = widget_payload()
		payload["id"] = 1
		res = client.post("/telegram-callback", json={"user": payload, "token": token})
		assert res.status_code == 401
		assert res.json()["success"] is False

	def test_invalid_token(self, client):
		res = client.post("/telegram-callback", json={"user": widget_payload(), "token": "garbage"})
		assert res.status_code == 401

	def test_missing_fields(self, client):
		token = register(client).json()["token"]
		res = client.post("/telegram-callback", json={"user": {"first_name": "A"}, "token": token})
		assert res.status_code == 400
