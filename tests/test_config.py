import pytest

from todolist.core.config import Settings
from todolist.core.errors import ConfigError
from todolist.main import create_app


def test_missing_required_settings_listed():
	settings = Settings(DATABASE_URL="", JWT_SECRET="", TELEGRAM_TOKEN="")
	with pytest.raises(ConfigError) as exc:
		settings.validate()
	for name in ("DATABASE_URL", "JWT_SECRET", "TELEGRAM_TOKEN"):
		assert name in str(exc.value)


def test_unknown_override_rejected():
	with pytest.raises(ConfigError):
		Settings(NOT_A_SETTING=1)


def test_defaults(settings):
	assert settings.ACCESS_TOKEN_EXPIRES_MIN == 60
	assert settings.TELEGRAM_AUTH_MAX_AGE_SEC == 86400
	assert settings.JWT_ALG == "HS256"


def test_create_app_fails_without_secret(settings):
	settings.JWT_SECRET = ""
	with pytest.raises(ConfigError):
		create_app(settings)


def test_bot_fails_without_token(settings):
	from todolist.bot.telegram import main

	settings.TELEGRAM_TOKEN = ""
	with pytest.raises(ConfigError):
		main(settings)
